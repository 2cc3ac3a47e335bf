"""Text generation providers used by the challenge and review generators.

Each integration is picked once at startup: a configured credential selects a
live client, otherwise ``NullTextGenerator`` makes every call fall back to the
local deterministic path.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from mentor.core.config import Settings

logger = logging.getLogger("mentor.llm")


class ProviderUnavailable(Exception):
    """No credential configured for this integration."""


class ProviderError(Exception):
    """The provider answered badly (non-2xx, transport failure, empty content)."""


class TextGenerator(Protocol):
    name: str
    model: str

    async def complete(
        self, system: str, prompt: str, *, max_tokens: int = 1500, temperature: float = 0.7
    ) -> str:
        ...


class NullTextGenerator:
    name = "null"

    def __init__(self, model: str = "fallback") -> None:
        self.model = model

    async def complete(
        self, system: str, prompt: str, *, max_tokens: int = 1500, temperature: float = 0.7
    ) -> str:
        raise ProviderUnavailable("text generation provider not configured")


class OpenAIChatGenerator:
    """Chat-completions client over plain HTTPS JSON."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        api_url: str,
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.timeout_s = timeout_s
        self._transport = transport

    async def complete(
        self, system: str, prompt: str, *, max_tokens: int = 1500, temperature: float = 0.7
    ) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        timeout = httpx.Timeout(connect=3.0, read=self.timeout_s, write=5.0, pool=5.0)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderError(f"request to {self.api_url} failed: {exc}") from exc
        if resp.status_code < 200 or resp.status_code >= 300:
            raise ProviderError(f"provider returned HTTP {resp.status_code}")
        try:
            body = resp.json()
            content = body["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(f"unexpected completion payload: {exc}") from exc
        if not isinstance(content, str) or not content.strip():
            raise ProviderError("empty completion content")
        return content


class BedrockClaudeGenerator:
    """Claude via AWS Bedrock; the boto3 call runs in a worker thread."""

    name = "bedrock"

    def __init__(self, settings: Settings, *, client: Any = None) -> None:
        self.model = settings.bedrock_model_id
        self._settings = settings
        self._client = client

    def _bedrock(self):
        if self._client is None:
            import boto3

            self._client = boto3.client(
                service_name="bedrock-runtime",
                region_name=self._settings.aws_region,
                aws_access_key_id=self._settings.aws_access_key_id,
                aws_secret_access_key=self._settings.aws_secret_access_key,
            )
        return self._client

    @staticmethod
    def _extract_text(resp_body: Dict[str, Any]) -> str:
        parts = []
        for block in resp_body.get("content") or []:
            if isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text") or "")
            elif isinstance(block, str):
                parts.append(block)
        return "".join(parts).strip()

    async def complete(
        self, system: str, prompt: str, *, max_tokens: int = 1500, temperature: float = 0.7
    ) -> str:
        from botocore.exceptions import BotoCoreError, ClientError

        body = json.dumps({
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system,
            "messages": [{"role": "user", "content": [{"type": "text", "text": prompt}]}],
        })

        def _invoke() -> Dict[str, Any]:
            response = self._bedrock().invoke_model(
                modelId=self.model,
                body=body,
                contentType="application/json",
                accept="application/json",
            )
            return json.loads(response["body"].read())

        try:
            resp_body = await asyncio.to_thread(_invoke)
        except (BotoCoreError, ClientError) as exc:
            raise ProviderError(f"bedrock invoke failed: {exc}") from exc
        text = self._extract_text(resp_body)
        if not text:
            raise ProviderError(f"empty response content: {json.dumps(resp_body)[:300]}")
        return text


def build_text_generator(api_key: str, model: str, settings: Settings) -> TextGenerator:
    """Pick the provider for one integration from its credential."""
    if settings.bedrock_enabled:
        if settings.aws_access_key_id and settings.aws_secret_access_key:
            logger.info("llm_provider backend=bedrock model=%s", settings.bedrock_model_id)
            return BedrockClaudeGenerator(settings)
        logger.info("llm_provider backend=bedrock missing-credentials using=fallback")
        return NullTextGenerator()
    if api_key:
        logger.info("llm_provider backend=openai model=%s", model)
        return OpenAIChatGenerator(
            api_key, model, api_url=settings.llm_api_url, timeout_s=settings.llm_timeout_s
        )
    logger.info("llm_provider backend=openai missing-credentials using=fallback")
    return NullTextGenerator()
