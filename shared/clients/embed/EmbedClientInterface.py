from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    """Embedding provider used for chunks at index time and for queries at search time."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        prefix = self.get_client_type().upper()
        self.embed_distance = helper_config.get_string_val(f"{prefix}_DISTANCE", default="Cosine")
        self.embed_model = helper_config.get_string_val(f"{prefix}_MODEL", default="text-embedding-3-small")
        self.embed_dimension = int(helper_config.get_number_val(f"{prefix}_DIMENSION", default=1536))
        self.embed_batch_size = max(1, int(helper_config.get_number_val(f"{prefix}_BATCH_SIZE", default=100)))

    def _get_client_type(self) -> str:
        return "embed"

    def get_vector_size(self) -> int:
        """Dimension of the produced vectors, used when the collection is created."""
        return self.embed_dimension

    ##########################################
    ############ ENGINE SPECIFIC #############
    ##########################################

    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        pass

    @abstractmethod
    def get_embed_payload(self, texts: list[str]) -> dict:
        pass

    @abstractmethod
    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """
        Returns:
            list[list[float]]: One vector per input, in input order.

        Raises:
            ValueError: If the response holds no embeddings.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        """Embed ``texts`` in batches of embed_batch_size, keeping input order.

        Raises:
            ClientRequestError: On a failed HTTP status.
            ValueError: If a batch comes back with missing or extra vectors.
        """
        texts = [texts] if isinstance(texts, str) else list(texts)
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.embed_batch_size):
            batch = texts[start:start + self.embed_batch_size]
            response = await self.do_request(
                method="POST",
                endpoint=self.get_endpoint_embedding(),
                json=self.get_embed_payload(batch),
                raise_on_error=True,
            )
            batch_vectors = self.extract_embeddings_from_response(response.json())
            if len(batch_vectors) != len(batch):
                raise ValueError("Got %d embeddings for %d inputs." % (len(batch_vectors), len(batch)))
            vectors.extend(batch_vectors)
        return vectors

    async def do_embed_one(self, text: str) -> list[float]:
        return (await self.do_embed([text]))[0]
