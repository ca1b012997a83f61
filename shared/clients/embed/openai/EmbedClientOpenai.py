from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientOpenai(EmbedClientInterface):
    """Embedding client for OpenAI and compatible gateways (/embeddings)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://api.openai.com/v1", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    def _get_engine_name(self) -> str:
        return "Openai"

    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.openai.com/v1"),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/models"

    def get_endpoint_embedding(self) -> str:
        return "/embeddings"

    def get_embed_payload(self, texts: list[str]) -> dict:
        payload = {"model": self.embed_model, "input": texts, "encoding_format": "float"}
        # only the text-embedding-3 family can shorten its vectors
        if self.embed_model.startswith("text-embedding-3"):
            payload["dimensions"] = self.embed_dimension
        return payload

    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        # items carry an "index"; sort so vectors line up with the inputs
        data = response_data.get("data")
        if not data or not data[0].get("embedding"):
            raise ValueError("No embeddings in response (keys: %s)." % list(response_data.keys()))
        return [item["embedding"] for item in sorted(data, key=lambda item: item.get("index", 0))]
