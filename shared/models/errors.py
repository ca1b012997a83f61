"""Exception taxonomy for the retrieval bridge.

Every error carries the HTTP status the API layer responds with, so routers
never have to translate exceptions themselves.
"""


class BridgeError(Exception):
    """Base class for all errors raised by the retrieval core."""

    code: str = "INTERNAL_ERROR"
    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidParameters(BridgeError):
    """Caller supplied an invalid parameter (e.g. top_k <= 0)."""

    code = "INVALID_PARAMETERS"
    http_status = 400


class InvalidScopeParameters(InvalidParameters):
    """A scope is unknown or lacks its required argument."""

    code = "INVALID_SCOPE_PARAMETERS"


class DocumentNotFound(BridgeError):
    code = "DOCUMENT_NOT_FOUND"
    http_status = 404


class MalformedIdentifier(BridgeError):
    """A chunk id returned by the vector index does not follow '{work_id}#chunk{index}'.

    Signals an internal consistency problem between the indexer and the index.
    """

    code = "MALFORMED_IDENTIFIER"
    http_status = 500


class UpstreamUnavailable(BridgeError):
    """An AI provider failed. The caller may retry."""

    code = "UPSTREAM_UNAVAILABLE"
    http_status = 502

    def __init__(self, message: str, rate_limited: bool = False):
        super().__init__(message)
        self.rate_limited = rate_limited
        if rate_limited:
            self.code = "AI_RATE_LIMIT"
            self.http_status = 429


class EmbeddingUnavailable(UpstreamUnavailable):
    code = "EMBEDDING_UNAVAILABLE"


class GenerationUnavailable(UpstreamUnavailable):
    code = "GENERATION_UNAVAILABLE"


class ClientRequestError(Exception):
    """A backend HTTP request returned a non-2xx status.

    Raised by the shared HTTP client; services translate it into one of the
    BridgeError types above.
    """

    def __init__(self, url: str, status_code: int, body: str = ""):
        super().__init__(f"Request to {url} failed with status {status_code}")
        self.url = url
        self.status_code = status_code
        self.body = body
