from shared.clients.ClientManager import ClientManager
from shared.clients.dms.DMSClientInterface import DMSClientInterface


class DMSClientManager(ClientManager):
    """Instantiates the configured work-note store client (DMS_ENGINE)."""

    kind = "dms"
    class_prefix = "DMS"
    default_engine = "worknote"

    def get_client(self) -> DMSClientInterface:
        return self.client
