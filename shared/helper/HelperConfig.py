"""Central configuration helper for the work-note retrieval bridge."""

import logging
import os

from shared.models.config import RetrievalSettings

_MISSING = object()
_TRUE_VALUES = ("true", "1", "yes")


class HelperConfig:
    """Reads all settings from environment variables.

    Keys are case-insensitive and an empty variable counts as unset. Every
    reader raises ValueError when the key is unset and no default is given.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read_raw(self, key: str, default):
        """Return the stripped env value, the default, or raise when neither exists."""
        raw = (os.getenv(key.upper()) or "").strip()
        if raw:
            return raw
        if default is None:
            raise ValueError(f"Environment variable '{key.upper()}' is not set.")
        return _MISSING

    def get_string_val(self, key: str, default: str | None = None) -> str:
        raw = self._read_raw(key, default)
        return default if raw is _MISSING else raw

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read an int, or a float when the value contains a dot."""
        raw = self._read_raw(key, default)
        if raw is _MISSING:
            return default
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        raw = self._read_raw(key, default)
        return default if raw is _MISSING else raw.lower() in _TRUE_VALUES

    def get_list_val(self, key: str, default: list[str] | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a list written as "[elem1,elem2,...]".

        Args:
            key (str): Environment variable name.
            default (list[str] | None): Fallback value if the variable is not set.
            separator (str): The delimiter between elements.
            element_type (type): The type each element is cast to.

        Raises:
            ValueError: If the value is not bracketed or an element cannot be cast.
        """
        raw = self._read_raw(key, default)
        if raw is _MISSING:
            return default
        if not (raw.startswith("[") and raw.endswith("]")):
            raise ValueError(f"Environment variable '{key.upper()}' must look like '[elem1{separator}elem2]'. Got: '{raw}'")
        try:
            return [element_type(elem.strip()) for elem in raw[1:-1].split(separator) if elem.strip()]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key.upper()}' contains an invalid {element_type.__name__}: {e}")

    def get_retrieval_settings(self) -> RetrievalSettings:
        """Collect the retrieval tunables from the environment.

        Unset variables fall back to the RetrievalSettings defaults.

        Returns:
            RetrievalSettings: The resolved settings.
        """
        defaults = RetrievalSettings()
        return RetrievalSettings(
            top_k=int(self.get_number_val("RAG_TOP_K", default=defaults.top_k)),
            min_score=float(self.get_number_val("RAG_MIN_SCORE", default=defaults.min_score)),
            max_context_chars=int(self.get_number_val("RAG_MAX_CONTEXT_CHARS", default=defaults.max_context_chars)),
            snippet_max_chars=int(self.get_number_val("RAG_SNIPPET_MAX_CHARS", default=defaults.snippet_max_chars)),
            similar_top_k=int(self.get_number_val("SIMILAR_NOTES_TOP_K", default=defaults.similar_top_k)),
            similar_min_score=float(self.get_number_val("SIMILAR_NOTES_MIN_SCORE", default=defaults.similar_min_score)),
            chunk_size_tokens=int(self.get_number_val("CHUNK_SIZE_TOKENS", default=defaults.chunk_size_tokens)),
        )

    def get_logger(self) -> logging.Logger:
        """Return the application logger.

        Returns:
            logging.Logger: The configured logger instance.
        """
        return self._logger
