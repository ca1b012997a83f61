"""Chunking of work notes into size-bounded segments for embedding.

The rendered text of a work note is its title, a blank line and its body.
Short texts become a single chunk; longer texts are cut into successive,
non-overlapping windows that end on whitespace. Chunk texts are never
stored: get_chunk_text() recomputes a window from the rendered text.

Token counts are estimated as ceil(chars / 4), which holds up reasonably
for both English and Korean text.
"""

import math

from shared.models.document import TextChunk
from shared.models.errors import InvalidParameters, MalformedIdentifier

CHARS_PER_TOKEN = 4
DEFAULT_CHUNK_SIZE_TOKENS = 512
CHUNK_ID_SEPARATOR = "#chunk"
WORK_SCOPE = "WORK"


def estimate_token_count(text: str) -> int:
    """Cheap token estimate used for chunk boundaries only."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def render_document_text(title: str, body: str) -> str:
    """Render the text that is chunked and embedded for a work note.

    Args:
        title (str): The work note title.
        body (str): The work note body, may be empty.

    Returns:
        str: The title alone for an empty body, otherwise "{title}\\n\\n{body}".
    """
    if not body or not body.strip():
        return title
    return f"{title}\n\n{body}"


def format_chunk_id(document_id: str, index: int) -> str:
    """Build the composite chunk identifier "{document_id}#chunk{index}".

    Raises:
        InvalidParameters: If the document id is empty or contains the separator, or the index is negative.
    """
    if not document_id or CHUNK_ID_SEPARATOR in document_id:
        raise InvalidParameters(f"Invalid document id for chunk identifier: {document_id!r}")
    if index < 0:
        raise InvalidParameters(f"Chunk index must not be negative, got {index}")
    return f"{document_id}{CHUNK_ID_SEPARATOR}{index}"


def parse_chunk_id(chunk_id: str) -> tuple[str, int]:
    """Split a chunk identifier into (document_id, index).

    Raises:
        MalformedIdentifier: If the separator is missing, the document id is
            empty, or the suffix is not a non-negative integer.
    """
    document_id, separator, index = chunk_id.rpartition(CHUNK_ID_SEPARATOR)
    if not separator or not document_id or not index.isascii() or not index.isdigit():
        raise MalformedIdentifier(f"Invalid chunk ID format: {chunk_id!r}")
    return document_id, int(index)


def _skip_whitespace(text: str, position: int) -> int:
    while position < len(text) and text[position].isspace():
        position += 1
    return position


def split_windows(text: str, max_chars: int) -> list[str]:
    """Cut text into successive windows of at most max_chars characters.

    A window ends at the last whitespace that fits; a single word longer than
    max_chars is hard-split. Whitespace between windows is dropped, so joining
    the windows with single spaces reproduces the text up to whitespace.

    Args:
        text (str): The text to split.
        max_chars (int): Maximum window length, must be positive.

    Returns:
        list[str]: The windows in order. Empty for blank text.
    """
    if max_chars <= 0:
        raise InvalidParameters(f"Window size must be positive, got {max_chars}")

    windows: list[str] = []
    length = len(text)
    start = _skip_whitespace(text, 0)
    while start < length:
        end = start + max_chars
        if end >= length:
            windows.append(text[start:].rstrip())
            break

        cut = end
        if not text[end].isspace():
            boundary = end
            while boundary > start and not text[boundary - 1].isspace():
                boundary -= 1
            if boundary > start:
                cut = boundary

        windows.append(text[start:cut].rstrip())
        start = _skip_whitespace(text, cut)
    return windows


class HelperChunking:
    """Deterministic chunker for work notes."""

    def __init__(self, chunk_size_tokens: int = DEFAULT_CHUNK_SIZE_TOKENS):
        if chunk_size_tokens <= 0:
            raise InvalidParameters(f"Chunk size must be positive, got {chunk_size_tokens}")
        self.chunk_size_tokens = chunk_size_tokens
        self.chunk_size_chars = chunk_size_tokens * CHARS_PER_TOKEN

    def estimate_token_count(self, text: str) -> int:
        return estimate_token_count(text)

    def _windows(self, full_text: str) -> list[str]:
        if estimate_token_count(full_text) <= self.chunk_size_tokens:
            return [full_text]
        return split_windows(full_text, self.chunk_size_chars)

    def document_windows(self, title: str, body: str) -> list[str]:
        """Chunk texts of a work note. A note without body is always one chunk holding the title."""
        if not body or not body.strip():
            return [title]
        return self._windows(render_document_text(title, body))

    def chunk(self, document_id: str, title: str, body: str, scope_metadata: dict | None = None) -> list[TextChunk]:
        """Split a work note into chunks ready for embedding.

        Always returns at least one chunk; indices run from 0 without gaps.
        The first chunk starts with the title.

        Args:
            document_id (str): The work note ID.
            title (str): The work note title.
            body (str): The work note body, may be empty.
            scope_metadata (dict | None): person_ids, dept_name, project_id, category, created_at_bucket.

        Returns:
            list[TextChunk]: The chunks in index order.
        """
        windows = self.document_windows(title, body)

        chunks: list[TextChunk] = []
        for index, window in enumerate(windows):
            metadata = dict(scope_metadata or {})
            metadata.update({"work_id": document_id, "scope": WORK_SCOPE, "chunk_index": index})
            chunks.append(TextChunk(
                chunk_id=format_chunk_id(document_id, index),
                work_id=document_id,
                chunk_index=index,
                text=window,
                metadata=metadata,
            ))
        return chunks

    def get_chunk_text(self, full_text: str, index: int) -> str:
        """Recompute the text of chunk `index` from the rendered text.

        Agrees with chunk() for the same rendered text and chunk size.

        Raises:
            InvalidParameters: If the index does not exist for this text.
        """
        return self._pick(self._windows(full_text) or [full_text], index)

    def get_document_chunk_text(self, title: str, body: str, index: int) -> str:
        """Like get_chunk_text(), but takes the same title/body branch as chunk().

        Raises:
            InvalidParameters: If the index does not exist for this note.
        """
        return self._pick(self.document_windows(title, body), index)

    @staticmethod
    def _pick(windows: list[str], index: int) -> str:
        if index < 0 or index >= len(windows):
            raise InvalidParameters(f"Chunk index {index} out of range (0..{len(windows) - 1})")
        return windows[index]
