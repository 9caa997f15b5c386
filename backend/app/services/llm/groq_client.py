import logging
from typing import Optional

import httpx

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class GroqClient:
    """
    Client for Groq's hosted Llama 3 chat-completions API (OpenAI-compatible).
    One httpx.AsyncClient is shared for connection reuse; close it with aclose().
    Requests are not retried.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        settings = settings or get_settings()
        self.api_key = settings.groq_api_key
        self.model = settings.groq_model
        self.api_url = settings.groq_api_url
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self._client = http_client or httpx.AsyncClient(timeout=settings.llm_timeout_seconds)

        if not self.api_key:
            logger.warning("GROQ_API_KEY is not set; explanations will fall back")

    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None) -> Optional[str]:
        """
        Generates a clinical explanation via Groq.
        Low temperature for consistent, factual responses.

        Returns None when the API cannot be reached or answers with an error.
        """
        logger.info("Sending request to Groq", extra={"model": self.model})

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
            response = await self._client.post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()

            data = response.json()
            generated_text = data["choices"][0]["message"]["content"]

            logger.info("Groq request successful", extra={"response_length": len(generated_text or "")})
            return generated_text

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Error communicating with Groq: {str(e)}")
            return None
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected response from Groq: {str(e)}")
            return None

    async def aclose(self) -> None:
        await self._client.aclose()
