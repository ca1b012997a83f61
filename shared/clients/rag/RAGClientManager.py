from shared.clients.ClientManager import ClientManager
from shared.clients.rag.RAGClientInterface import RAGClientInterface


class RAGClientManager(ClientManager):
    """Instantiates the configured vector index client (RAG_ENGINE)."""

    kind = "rag"
    class_prefix = "RAG"
    default_engine = "qdrant"

    def get_client(self) -> RAGClientInterface:
        return self.client
