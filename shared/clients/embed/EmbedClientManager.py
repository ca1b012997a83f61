from shared.clients.ClientManager import ClientManager
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface


class EmbedClientManager(ClientManager):
    """Instantiates the configured embedding client (EMBED_ENGINE)."""

    kind = "embed"
    class_prefix = "Embed"
    default_engine = "openai"

    def get_client(self) -> EmbedClientInterface:
        return self.client
