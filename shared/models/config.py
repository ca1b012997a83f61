from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter required for a client.

    Attributes:
        env_key (str): The key/name of the environment variable to read (without the "<TYPE>_<ENGINE>_" prefix).
        val_type (str): The expected type of the environment variable's value. Supported types are "string", "number", "bool", and "list".
        default (str | int | float | bool | list | None): An optional default value if the environment variable is not set. If None, the variable is required and an error will be raised if it is not set.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None


class RetrievalSettings(BaseModel):
    """
    Tunables of the retrieval pipeline.

    Attributes:
        top_k (int): Default number of vector matches requested for RAG queries.
        min_score (float): Minimum similarity a document needs to be used as RAG context.
        max_context_chars (int): Upper bound for the assembled prompt context.
        snippet_max_chars (int): Upper bound for a single context excerpt.
        similar_top_k (int): Default number of vector matches for similar-note lookups.
        similar_min_score (float): Minimum similarity for similar-note lookups.
        chunk_size_tokens (int): Chunk budget in estimated tokens.
    """

    top_k: int = 5
    min_score: float = 0.5
    max_context_chars: int = 6000
    snippet_max_chars: int = 500
    similar_top_k: int = 3
    similar_min_score: float = 0.4
    chunk_size_tokens: int = 512
