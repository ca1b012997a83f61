from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig


class LLMClientInterface(ClientInterface):
    """Chat completion provider that turns the assembled RAG prompt into an answer."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # generation settings, shared by all engines
        prefix = self.get_client_type().upper()
        self.chat_model = helper_config.get_string_val(f"{prefix}_CHAT_MODEL", default="gpt-4o-mini")
        self.temperature = float(helper_config.get_number_val(f"{prefix}_TEMPERATURE", default=0.7))
        self.max_tokens = int(helper_config.get_number_val(f"{prefix}_MAX_TOKENS", default=500))

    def _get_client_type(self) -> str:
        return "llm"

    ##########################################
    ############ ENGINE SPECIFIC #############
    ##########################################

    @abstractmethod
    def _get_endpoint_chat(self) -> str:
        pass

    @abstractmethod
    def get_chat_payload(self, messages: list[dict]) -> dict:
        """Request body for ``messages`` in OpenAI format ([{"role": "user", "content": "..."}])."""
        pass

    @abstractmethod
    def extract_chat_response(self, response_data: dict) -> str:
        """
        Raises:
            ValueError: If the response carries no reply text.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_chat(self, messages: list[dict]) -> str:
        """
        Returns:
            str: The assistant reply.

        Raises:
            ClientRequestError: On a failed HTTP status (429 when the provider rate-limits).
            ValueError: If the response carries no reply text.
        """
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_chat(),
            json=self.get_chat_payload(messages),
            raise_on_error=True,
        )
        return self.extract_chat_response(response.json())

    async def do_complete(self, prompt: str) -> str:
        return await self.do_chat([{"role": "user", "content": prompt}])
