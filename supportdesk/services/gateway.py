"""Text-completion gateway client (OpenAI-compatible chat completions)."""

from typing import Any, Dict, List, Optional

import httpx

from ..errors import (
    GatewayError,
    GatewayRateLimitedError,
    GatewayTimeoutError,
    GatewayUnavailableError,
)
from ..utils.logger import get_app_logger


# Statuses meaning "no capacity for us right now" rather than a broken request
UNAVAILABLE_STATUSES = {402, 503}


class TextCompletionGateway:
    """Calls a hosted chat-completions endpoint and returns the reply text."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        model: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the gateway client.

        Args:
            base_url: API base URL, e.g. https://host/v1
            api_key: Bearer token; without one every call is unavailable
            model: Model name sent with each request
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.logger = get_app_logger()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_messages(
        self,
        system_prompt: str,
        history: List[Dict[str, str]],
        new_message: str
    ) -> List[Dict[str, str]]:
        """Assemble the chat-completions message list."""
        return [
            {"role": "system", "content": system_prompt},
            *history,
            {"role": "user", "content": new_message},
        ]

    async def complete(
        self,
        system_prompt: str,
        history: List[Dict[str, str]],
        new_message: str
    ) -> str:
        """
        Generate a reply.

        Args:
            system_prompt: Fixed instructions for the assistant
            history: Prior turns as {"role", "content"} dicts, oldest first
            new_message: The user's new message

        Returns:
            The generated text

        Raises:
            GatewayRateLimitedError: HTTP 429
            GatewayUnavailableError: not configured, HTTP 402 or 503
            GatewayTimeoutError: no answer within the timeout
            GatewayError: any other failure, including an empty completion
        """
        if not self.is_configured:
            raise GatewayUnavailableError("AI service not configured")

        payload = {
            "model": self.model,
            "messages": self.build_messages(system_prompt, history, new_message),
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            response = await self._client.post("/chat/completions", json=payload, headers=headers)
        except httpx.TimeoutException as e:
            self.logger.error(f"AI gateway timed out after {self.timeout}s")
            raise GatewayTimeoutError(f"AI gateway timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            self.logger.error(f"AI gateway request failed: {e}")
            raise GatewayError(f"AI gateway request failed: {e}") from e

        if response.status_code == 429:
            self.logger.warning("AI gateway rate limited the request")
            raise GatewayRateLimitedError("AI gateway rate limited")
        if response.status_code in UNAVAILABLE_STATUSES:
            self.logger.error(f"AI gateway unavailable: {response.status_code} {response.text}")
            raise GatewayUnavailableError(f"AI gateway unavailable ({response.status_code})")
        if response.is_error:
            self.logger.error(f"AI gateway error: {response.status_code} {response.text}")
            raise GatewayError(f"AI gateway error ({response.status_code})")

        return self._extract_text(response)

    def _extract_text(self, response: httpx.Response) -> str:
        try:
            data: Dict[str, Any] = response.json()
        except ValueError as e:
            raise GatewayError("AI gateway returned invalid JSON") from e

        if not isinstance(data, dict):
            raise GatewayError("AI gateway returned an unexpected payload")

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise GatewayError("AI gateway returned no choices")

        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None

        if not isinstance(content, str) or not content.strip():
            raise GatewayError("AI gateway returned an empty completion")
        return content

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
