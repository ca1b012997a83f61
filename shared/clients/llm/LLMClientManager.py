from shared.clients.ClientManager import ClientManager
from shared.clients.llm.LLMClientInterface import LLMClientInterface


class LLMClientManager(ClientManager):
    """Instantiates the configured chat completion client (LLM_ENGINE)."""

    kind = "llm"
    class_prefix = "LLM"
    default_engine = "openai"

    def get_client(self) -> LLMClientInterface:
        return self.client
