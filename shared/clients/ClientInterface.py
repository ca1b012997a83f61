from abc import ABC, abstractmethod

import httpx
from httpx._types import QueryParamTypes, RequestContent
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.errors import ClientRequestError


class ClientInterface(ABC):
    """
    Base class of every backend client (work-note store, vector index, embedding and chat providers).

    A client is identified by its kind and engine, which together prefix its env
    keys: the Qdrant vector index reads RAG_QDRANT_BASE_URL, RAG_QDRANT_API_KEY, ...
    The shared httpx.AsyncClient is created by boot() and released by close().
    """

    # val_type -> name of the HelperConfig reader
    _CONFIG_READERS: dict[str, str] = {
        "string": "get_string_val",
        "number": "get_number_val",
        "bool": "get_bool_val",
        "list": "get_list_val",
    }

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)
        self._client: httpx.AsyncClient | None = None

        # fail on startup instead of on the first request
        for config in self._get_required_config():
            self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    ##########################################
    ############### IDENTITY #################
    ##########################################

    def get_client_type(self) -> str:
        """Lowercase client kind, e.g. "rag"."""
        return self._get_client_type().lower()

    def get_engine_name(self) -> str:
        """Lowercase engine name, e.g. "qdrant"."""
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        pass

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    ##########################################
    ################ CONFIG ##################
    ##########################################

    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns:
            list[EnvConfig]: The env keys (without kind/engine prefix) that must resolve for this engine.
        """
        pass

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Reads an engine-scoped env value.

        Args:
            raw_key (str): Key without prefix, e.g. "BASE_URL".
            default (Any): Value used when the key is unset. None makes the key mandatory.
            val_type (str): One of "string", "number", "bool", "list".

        Raises:
            ValueError: On an unknown val_type, or when HelperConfig rejects the value.
        """
        key = f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}_{raw_key.upper()}"
        reader = self._CONFIG_READERS.get(val_type)
        if reader is None:
            raise ValueError(f"Unsupported config value type '{val_type}' for {key}.")
        return getattr(self._helper_config, reader)(key, default=default)

    ##########################################
    ############### BACKEND ##################
    ##########################################

    @abstractmethod
    def _get_auth_header(self) -> dict:
        """Headers that authenticate against the backend; empty when no key is configured."""
        pass

    @abstractmethod
    def _get_base_url(self) -> str:
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Create the HTTP client. Tests pass an httpx.MockTransport."""
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_healthcheck(self) -> httpx.Response:
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck(), raise_on_error=True)

    def _build_url(self, endpoint: str) -> str:
        path = endpoint.strip().lstrip("/")
        base = self._get_base_url().rstrip("/")
        return f"{base}/{path}" if path else base

    async def do_request(
        self,
        method: str = "GET",
        content: RequestContent | None = None,
        json: dict | list | None = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
    ) -> httpx.Response:
        """
        Sends a request to the backend and returns the raw response.

        Exactly one body is sent: ``content`` if given, otherwise ``json``.
        With ``raise_on_error`` a status >= 300 is logged and raised as
        ClientRequestError so services can map it to their own error types.

        Raises:
            RuntimeError: If boot() was not called.
            ClientRequestError: On a failed status when raise_on_error is set.
        """
        if self._client is None:
            raise RuntimeError(f"{self.get_client_type()} client not booted. Call boot() before making requests.")

        url = self._build_url(endpoint)
        headers = {**self._get_auth_header(), **(additional_headers or {})}
        body = {"content": content} if content is not None else ({"json": json} if json is not None else {})

        response = await self._client.request(method, url, headers=headers, params=params, timeout=self.timeout, **body)

        if raise_on_error and response.status_code >= 300:
            self.logging.error("%s %s failed with status %d: %s", method, url, response.status_code, response.text[:200])
            raise ClientRequestError(url=url, status_code=response.status_code, body=response.text)

        return response
