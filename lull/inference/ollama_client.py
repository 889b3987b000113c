"""Minimal async client for the Ollama chat API."""

from typing import Any, Dict, List, Optional
import logging
import aiohttp
import asyncio
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from lull.core.interfaces import Message
from lull.core.config import OllamaConfig

logger = logging.getLogger(__name__)

DEFAULT_STOP_TOKENS = ["User:", "Assistant:", "[System]:"]


class OllamaConnectionError(Exception):
    pass


class OllamaClient:
    def __init__(self, config: OllamaConfig, retry_attempts: Optional[int] = None):
        self.config = config
        self.retry_attempts = config.retry_attempts if retry_attempts is None else retry_attempts
        self.base_url = config.url.rstrip("/")
        self.model = config.model
        self.timeout = aiohttp.ClientTimeout(total=config.timeout_seconds)

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(OllamaConnectionError),
            stop=stop_after_attempt(max(1, self.retry_attempts)),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            reraise=True
        )

    async def chat(
        self,
        messages: List[Message],
        temperature: float = 0.8,
        max_tokens: int = 200,
        stop_tokens: Optional[List[str]] = None
    ) -> str:
        """
        Send a chat request and return the stripped reply.

        Raises:
            OllamaConnectionError: after retries are exhausted
        """
        payload = {
            "model": self.model,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
                "repeat_penalty": 1.2,
                "stop": stop_tokens if stop_tokens is not None else DEFAULT_STOP_TOKENS
            }
        }

        async for attempt in self._retrying():
            with attempt:
                return await self._post_chat(payload)

    async def _post_chat(self, payload: Dict[str, Any]) -> str:
        url = f"{self.base_url}/api/chat"

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, json=payload) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        raise OllamaConnectionError(
                            f"Ollama returned {resp.status}: {error_text}"
                        )

                    data = await resp.json()
                    content = data.get('message', {}).get('content', '')

                    if not content or not content.strip():
                        logger.warning("Empty response from Ollama, will retry")
                        raise OllamaConnectionError("Empty response from Ollama")

                    return content.strip()

        except aiohttp.ClientError as e:
            logger.error(f"Ollama connection error: {e}")
            raise OllamaConnectionError(f"Failed to connect to Ollama: {e}")
        except asyncio.TimeoutError:
            logger.error("Ollama request timed out")
            raise OllamaConnectionError("Ollama request timed out")

    async def health_check(self) -> bool:
        url = f"{self.base_url}/api/tags"

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=5)) as session:
                async with session.get(url) as resp:
                    return resp.status == 200
        except Exception as e:
            logger.debug(f"Ollama health check failed: {e}")
            return False
