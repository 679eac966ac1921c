"""AI summarization calls against an OpenAI-compatible chat completions API."""

from __future__ import annotations

import json
import os
from typing import Any, TypeVar

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from ..config import AIConfig, SummaryTaskConfig
from ..errors import SummarizationError
from ..logging_conf import configure_logging
from .records import AccountantSummary, ClientSummary, IndustryTags

SchemaT = TypeVar("SchemaT", bound=BaseModel)

CLIENT_SUMMARY_TASK = "client_summary"
ACCOUNTANT_SUMMARY_TASK = "accountant_summary"
TAGGING_TASK = "tagging"

CLIENT_SUMMARY_PROMPT = """\
あなたは神奈川県の中小企業を支援するプロのコンサルタントです。
以下のURLとWebサイト本文を読み、中小企業の経営者が知りたい情報を簡潔にまとめてください。
URL: {url}
本文: {content}
必ず以下のJSON形式で、日本語で回答してください。
{schema}
"""

ACCOUNTANT_SUMMARY_PROMPT = """\
あなたは神奈川県の企業を支援する経験豊富な税理士です。
以下のURLと公募要領の本文を読み、専門家として確認すべき詳細情報を分析・要約してください。
URL: {url}
本文: {content}
必ず以下のJSON形式で、日本語で回答してください。
{schema}
"""

TAGGING_PROMPT = """\
以下の補助金名と本文を読み、対象となる産業タグを付与してください。
タグは3〜5個程度にし、「全業種対象」も適切に使用してください。
補助金名: {name}
本文: {content}
必ず以下のJSON形式で回答してください。
{schema}
"""


def truncate(content: str, limit: int) -> str:
    return content[:limit]


def describe_schema(schema: type[BaseModel]) -> str:
    """Render the expected JSON keys and their meaning for a prompt."""

    lines = ["{"]
    for name, field in schema.model_fields.items():
        kind = "string[]" if field.annotation == list[str] else "string"
        lines.append(f'  "{name}": {kind}  // {field.description or ""}')
    lines.append("}")
    return "\n".join(lines)


def build_ai_client(config: AIConfig) -> OpenAI | None:
    """Create the chat completions client described by ``config``.

    Returns ``None`` when the API key is not set; every summarization call
    then fails for its own candidate.
    """

    api_key = os.environ.get(config.api_key_env)
    if not api_key:
        configure_logging().warning("ai_api_key_missing", env=config.api_key_env)
        return None
    return OpenAI(
        api_key=api_key,
        base_url=config.base_url,
        timeout=config.timeout_seconds,
    )


class Summarizer:
    """Issue the three structured summarization prompts."""

    def __init__(self, client: Any, config: AIConfig) -> None:
        self.client = client
        self.config = config
        self.logger = configure_logging().bind(component="summarizer")

    def summarize_for_client(self, url: str, content: str) -> ClientSummary:
        settings = self.config.client_summary
        prompt = CLIENT_SUMMARY_PROMPT.format(
            url=url,
            content=truncate(content, settings.max_content_chars),
            schema=describe_schema(ClientSummary),
        )
        return self._complete(CLIENT_SUMMARY_TASK, prompt, ClientSummary, settings)

    def summarize_for_accountant(self, url: str, content: str) -> AccountantSummary:
        settings = self.config.accountant_summary
        prompt = ACCOUNTANT_SUMMARY_PROMPT.format(
            url=url,
            content=truncate(content, settings.max_content_chars),
            schema=describe_schema(AccountantSummary),
        )
        return self._complete(ACCOUNTANT_SUMMARY_TASK, prompt, AccountantSummary, settings)

    def tag_industries(self, name: str, content: str) -> IndustryTags:
        settings = self.config.tagging
        prompt = TAGGING_PROMPT.format(
            name=name,
            content=truncate(content, settings.max_content_chars),
            schema=describe_schema(IndustryTags),
        )
        return self._complete(TAGGING_TASK, prompt, IndustryTags, settings)

    def _complete(
        self,
        task: str,
        prompt: str,
        schema: type[SchemaT],
        settings: SummaryTaskConfig,
    ) -> SchemaT:
        if self.client is None:
            raise SummarizationError(task, f"no API key set in ${self.config.api_key_env}")
        self.logger.debug("ai_request", task=task, model=self.config.model, prompt_chars=len(prompt))
        try:
            response = self.client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=settings.temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            raise SummarizationError(task, f"request failed: {exc}") from exc

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise SummarizationError(task, "empty response")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SummarizationError(task, f"response is not JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise SummarizationError(task, "response is not a JSON object")
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            raise SummarizationError(task, f"response does not match schema: {exc}") from exc


__all__ = [
    "ACCOUNTANT_SUMMARY_TASK",
    "CLIENT_SUMMARY_TASK",
    "Summarizer",
    "TAGGING_TASK",
    "build_ai_client",
    "describe_schema",
    "truncate",
]
