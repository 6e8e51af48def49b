import logging
import httpx
from typing import Optional

from pharmaguard.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class OpenAIClient:
    """
    Client for an OpenAI-compatible chat completion endpoint.
    Sends exactly one request per call (no retries) bounded by the
    configured timeout. Returns the completion text, or None on any failure.
    """

    def __init__(
        self,
        api_key: str = None,
        model: str = None,
        base_url: str = None,
        timeout: float = None,
        settings: Settings = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        settings = settings or get_settings()
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self.temperature = settings.temperature
        self.max_tokens = settings.max_tokens
        self.completions_endpoint = f"{self.base_url}/chat/completions"
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def generate_text(self, prompt: str, system_prompt: str = "") -> Optional[str]:
        """Sends one chat completion request and returns the message content."""
        logger.debug("Sending request to completion endpoint", extra={"model": self.model})

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.completions_endpoint, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()

            generated_text = data["choices"][0]["message"]["content"]
            if not isinstance(generated_text, str):
                raise TypeError(f"unexpected completion content type: {type(generated_text).__name__}")

            logger.debug("Completion request successful", extra={"response_length": len(generated_text)})
            return generated_text

        except httpx.TimeoutException as e:
            logger.error(f"Completion request timed out after {self.timeout}s: {str(e)}")
            return None
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Error communicating with completion endpoint: {str(e)}")
            return None
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected completion response shape: {str(e)}")
            return None
