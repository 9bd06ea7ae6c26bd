"""scouter.evaluator.openai_evaluator: LLM rating of links and page content.

Talks to any OpenAI-compatible chat completions endpoint in JSON mode, so the
same class serves OpenAI itself and a local Ollama (``base_url`` set to
``http://localhost:11434/v1``).
"""
from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError, field_validator

from scouter.config import EvaluatorConfig
from scouter.crawler.models import LinkEvaluation, Priority
from scouter.errors import EvaluationError
from scouter.evaluator.prompts import (
    CONTENT_SYSTEM_PROMPT,
    LINK_SYSTEM_PROMPT,
    content_prompt,
    link_prompt,
)
from scouter.logger import LOGGER_NAME

__all__ = ["OpenAIEvaluator", "LinkEvaluatedResult", "PageEvaluatedResult", "strip_code_fence"]

_FENCE_RE = re.compile(r"```[^\n]*\n(.*?)\n?```", re.S)


def strip_code_fence(text: str) -> str:
    """Return the body of the first fenced block in *text*, or *text* stripped."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


class _RatedLink(BaseModel):
    url: str
    priority: Priority

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, v: Any) -> Priority:
        return Priority.parse(v)


class LinkEvaluatedResult(BaseModel):
    links: List[_RatedLink] = Field(default_factory=list)


class PageEvaluatedResult(BaseModel):
    priority: Priority

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, v: Any) -> Priority:
        return Priority.parse(v)


class OpenAIEvaluator:
    """Evaluator backed by chat completions."""

    def __init__(self, config: Optional[EvaluatorConfig] = None, client: Optional[AsyncOpenAI] = None) -> None:
        self.config = config or EvaluatorConfig()
        self.logger = logging.getLogger(LOGGER_NAME)
        if client is None:
            api_key = os.getenv(self.config.api_key_env)
            if not api_key:
                if self.config.base_url is None:
                    raise ValueError(f"Missing {self.config.api_key_env} environment variable")
                # local OpenAI-compatible servers ignore the key
                api_key = "unused"
            client = AsyncOpenAI(api_key=api_key, base_url=self.config.base_url, timeout=self.config.timeout)
        self.client = client

    async def evaluate_targets(self, targets: Dict[str, List[str]], query: str) -> List[LinkEvaluation]:
        if not targets:
            return []
        raw = await self._complete(LINK_SYSTEM_PROMPT, link_prompt(targets, query))
        try:
            result = LinkEvaluatedResult.model_validate_json(raw)
        except ValidationError as exc:
            raise EvaluationError(f"invalid link evaluation response: {exc}") from exc
        return [LinkEvaluation(url=item.url, priority=item.priority) for item in result.links]

    async def evaluate_content(self, content: str, query: str) -> Priority:
        raw = await self._complete(
            CONTENT_SYSTEM_PROMPT, content_prompt(content, query, self.config.content_chars)
        )
        try:
            return PageEvaluatedResult.model_validate_json(raw).priority
        except ValidationError as exc:
            raise EvaluationError(f"invalid content evaluation response: {exc}") from exc

    async def _complete(self, system: str, user: str) -> str:
        try:
            resp = await self.client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                response_format={"type": "json_object"},
                temperature=self.config.temperature,
            )
        except OpenAIError as exc:
            raise EvaluationError(f"{self.config.model}: {exc}") from exc
        if not resp.choices or not resp.choices[0].message.content:
            raise EvaluationError("empty response")
        raw = strip_code_fence(resp.choices[0].message.content)
        self.logger.debug("LLM response: %s", raw[:500])
        return raw
