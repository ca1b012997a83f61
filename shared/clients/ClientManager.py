import importlib

from shared.helper.HelperConfig import HelperConfig


class ClientManager:
    """
    Resolves ``<KIND>_ENGINE`` to a client class and instantiates it.

    Engines live in ``shared/clients/<kind>/<engine>/<Kind>Client<Engine>.py``,
    e.g. RAG_ENGINE=qdrant loads ``shared.clients.rag.qdrant.RAGClientQdrant``.
    Subclasses only declare the kind, its class prefix and the default engine.
    """

    kind: str = ""
    class_prefix: str = ""
    default_engine: str = ""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        env_key = f"{self.kind.upper()}_ENGINE"
        engine = self.helper_config.get_string_val(env_key, default=self.default_engine)
        if not engine or not engine.strip():
            raise ValueError(f"No {self.class_prefix} engine specified in configuration ({env_key}).")
        return engine.strip().lower().capitalize()

    def _initialize_client(self):
        engine = self._get_engine_from_env()
        class_name = f"{self.class_prefix}Client{engine}"
        module_path = f"shared.clients.{self.kind}.{engine.lower()}.{class_name}"
        try:
            client_class = getattr(importlib.import_module(module_path), class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported {self.class_prefix} engine '{engine}'. Error: {e}")

        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated %s client for engine: %s", self.class_prefix, engine)
        return client

    def get_client(self):
        return self.client
