from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

# model families that reject a custom temperature and max_tokens
REASONING_MODEL_PREFIXES = ("o1", "o3", "o4", "gpt-5")


def is_reasoning_model(model: str) -> bool:
    name = model.strip().lower().rsplit("/", 1)[-1]
    return name.startswith(REASONING_MODEL_PREFIXES)


class LLMClientOpenai(LLMClientInterface):
    """Chat client for OpenAI and compatible gateways (/chat/completions)."""

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

    def _get_endpoint_chat(self) -> str:
        return "/chat/completions"

    def get_chat_payload(self, messages: list[dict]) -> dict:
        payload = {"model": self.chat_model, "messages": messages}
        if is_reasoning_model(self.chat_model):
            payload["max_completion_tokens"] = self.max_tokens
        else:
            payload["max_tokens"] = self.max_tokens
            payload["temperature"] = self.temperature
        return payload

    def extract_chat_response(self, response_data: dict) -> str:
        choices = response_data.get("choices") or []
        content = (choices[0].get("message") or {}).get("content") if choices else None
        if not content:
            raise ValueError("No reply in chat completion response (keys: %s)." % list(response_data.keys()))
        return content
