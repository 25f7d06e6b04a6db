"""
Completion client for task extraction.

Sends the prepared chat messages to Together.ai (official SDK) in JSON mode and
returns the raw completion text. Parsing the text is left to the normalizer:
models routinely wrap JSON in fences or prose even in JSON mode.

Failures are reported once; the SDK's own retry loop is disabled.
"""

import asyncio

import structlog

from task_intake.config import Settings, get_settings
from task_intake.errors import ProviderTransportError, UnparsableResponse

logger = structlog.get_logger()

SERVICE_NAME = "together"


class CompletionClient:
    """Together.ai chat completion client."""

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str,
        base_url: str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 2048,
        timeout: float = 60.0,
        client=None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CompletionClient":
        settings = settings or get_settings()
        return cls(
            settings.together_api_key,
            model=settings.together_model,
            base_url=settings.together_base_url,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout_seconds,
        )

    @property
    def async_client(self):
        if self._client is None:
            from together import AsyncTogether

            self._client = AsyncTogether(
                api_key=self.api_key,
                base_url=self.base_url,
                max_retries=0,
            )
        return self._client

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """
        Request a JSON-object completion and return its text.

        Args:
            messages: Role-tagged chat messages (system instruction, then user text)

        Returns:
            The first choice's message content

        Raises:
            ProviderTransportError: The provider could not be reached or rejected the call
            UnparsableResponse: The provider answered with an empty completion
        """
        logger.info("Sending completion request", model=self.model, message_count=len(messages))

        try:
            response = await asyncio.wait_for(
                self.async_client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    response_format={"type": "json_object"},
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error("Completion request timed out", model=self.model, timeout=self.timeout)
            raise ProviderTransportError(
                service=SERVICE_NAME,
                details=f"Completion timed out after {self.timeout}s",
            ) from e
        except Exception as e:
            logger.error("Completion request failed", model=self.model, error=str(e))
            status_code = getattr(e, "status_code", None)
            raise ProviderTransportError(
                service=SERVICE_NAME,
                details=str(e),
                status_code=status_code if isinstance(status_code, int) else None,
            ) from e

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        if not content.strip():
            raise UnparsableResponse("Completion provider returned an empty response")

        logger.info("Received completion", model=self.model, length=len(content))
        return content


# =============================================================================
# Singleton
# =============================================================================

_completion_client: CompletionClient | None = None


def get_completion_client() -> CompletionClient:
    """Get the singleton completion client."""
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient.from_settings()
    return _completion_client
