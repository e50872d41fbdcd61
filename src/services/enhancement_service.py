"""
Bedrock text enhancement.

Optionally rewrites the canned chat text in a more conversational register.
The rewrite is additive: when enhancement is disabled or the model call fails
for any reason, callers keep the canned message.
"""

from __future__ import annotations

import hashlib
import json
import time
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from config.settings import Settings, get_settings
from models.chat import ChatMessage, QueryContext
from utils.cache_service import LRUCache
from utils.logging_config import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are an AI analytics assistant for a direct mail marketing company serving cruise lines. You help marketing teams understand their campaign performance data.

Your responses should be:
- Conversational and helpful, like a knowledgeable colleague
- Data-driven but not robotic
- Actionable - suggest what they might do with the insight
- Concise - 2-3 sentences max for the main insight

You'll receive the user's question and pre-computed data/analysis. Your job is to present that data in a natural, insightful way. Don't make up numbers - use only the data provided.

Important context:
- ROAS = Return on Ad Spend (revenue / ad spend)
- Campaign types: Prospecting (cold audiences), Reactivation (lapsed customers), Retargeting (site visitors)
- Itineraries: Caribbean, Alaska, Europe, Mediterranean, Hawaii, Asia, Australia
- Cabin types: Inside, Ocean View, Balcony, Suite (in order of price)"""

ANTHROPIC_VERSION = "bedrock-2023-05-31"

_FAILURES = (BotoCoreError, ClientError, KeyError, IndexError, TypeError, ValueError)


def build_prompt(query: str, message: ChatMessage, context: QueryContext) -> str:
    previous = f'\n\nPrevious question was: "{context.last_query}"' if context.last_query else ""
    data = ""
    if message.visualization is not None:
        serialized = message.visualization.to_wire().get("data")
        data = f"\n\nData to present:\n{json.dumps(serialized, indent=2)}"
    return (
        f'User asked: "{query}"{previous}{data}\n\n'
        "Provide a natural, insightful response presenting this data. "
        "Be conversational and suggest what action they might take."
    )


class EnhancementService:
    """Rewrites assistant text through Bedrock with a bounded, cached call."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Any = None,
        cache: Optional[LRUCache] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self.cache = cache or LRUCache(
            max_size=self.settings.cache_max_size,
            ttl_seconds=self.settings.cache_ttl_seconds,
        )

    @property
    def enabled(self) -> bool:
        return self.settings.llm_enhancement_enabled

    @property
    def client(self):
        if self._client is None:
            timeout = self.settings.llm_timeout_seconds
            self._client = boto3.client(
                "bedrock-runtime",
                region_name=self.settings.aws_region,
                config=Config(
                    connect_timeout=timeout,
                    read_timeout=timeout,
                    retries={"max_attempts": 0},
                ),
            )
        return self._client

    def _cache_counters(self) -> dict:
        stats = self.cache.stats()
        return {"cache_hits": stats["hits"], "cache_misses": stats["misses"], "cache_size": stats["size"]}

    @staticmethod
    def _cache_key(prompt: str) -> str:
        return hashlib.md5(prompt.encode()).hexdigest()

    def enhance(self, query: str, message: ChatMessage, context: QueryContext) -> Optional[str]:
        """Return rewritten text, or None to keep the canned message."""
        if not self.enabled:
            return None

        prompt = build_prompt(query, message, context)
        cache_key = self._cache_key(prompt)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Enhancement cache hit", extra={"prompt_hash": cache_key[:8], **self._cache_counters()})
            return cached

        start = time.perf_counter()
        try:
            response = self.client.invoke_model(
                modelId=self.settings.model_id,
                contentType="application/json",
                accept="application/json",
                body=json.dumps(
                    {
                        "anthropic_version": ANTHROPIC_VERSION,
                        "system": SYSTEM_PROMPT,
                        "messages": [
                            {"role": "user", "content": [{"type": "text", "text": prompt}]}
                        ],
                        "max_tokens": self.settings.llm_max_tokens,
                        "temperature": self.settings.llm_temperature,
                    }
                ),
            )
            payload = json.loads(response["body"].read())
            text = payload["content"][0]["text"].strip()
        except _FAILURES as exc:
            logger.warning(
                "Enhancement failed; keeping canned response",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return None

        if not text:
            logger.warning("Enhancement returned empty text; keeping canned response")
            return None

        self.cache.set(cache_key, text)
        logger.info(
            "Enhancement complete",
            extra={
                "latency_ms": int((time.perf_counter() - start) * 1000),
                "model_id": self.settings.model_id,
                **self._cache_counters(),
            },
        )
        return text
