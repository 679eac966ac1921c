"""Shared fixtures: temporary stores, a fake chat client and pipeline builders."""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from threading import Lock
from types import SimpleNamespace
from typing import Any, Callable, Iterable

import pytest

from subsidy_navigator.config import AIConfig, ConfigLocator, ConfigRepository
from subsidy_navigator.engine import (
    DeduplicationCheck,
    RecordAssembler,
    StaticRecordSource,
    SummarizationFanout,
    Summarizer,
)
from subsidy_navigator.infra import SQLiteManager
from subsidy_navigator.pipeline import SubsidyPipeline
from subsidy_navigator.store import SQLiteDocumentStore

COLLECTION = "subsidies"

CLIENT_PAYLOAD = {
    "catchphrase": "製造業のDXを後押し",
    "merit": "IoT・AI導入費用の半分を補助",
    "target": "県内の製造業を営む中小企業",
    "amount": "最大250万円",
    "deadline": "2025-12-31",
}
ACCOUNTANT_PAYLOAD = {
    "overview": "県内中小企業のDXを支援する制度",
    "requirements": "県内に事業所、従業員5名以上",
    "expenses": "ソフトウェア導入費、コンサルティング費用",
    "pitfalls": "国・県の他補助金との併用不可",
}
TAGS_PAYLOAD = {"industry_tags": ["製造業", "IT・情報通信業", "全業種対象"]}


def detect_task(prompt: str) -> str:
    if "産業タグを付与" in prompt:
        return "tagging"
    if "税理士" in prompt:
        return "accountant_summary"
    return "client_summary"


class FakeChatClient:
    """Mimic ``OpenAI().chat.completions.create`` with canned JSON answers.

    ``overrides`` maps a task name to a payload dict, a raw string, or an
    exception instance (raised) or a callable taking the prompt.
    """

    def __init__(self, overrides: dict[str, Any] | None = None) -> None:
        self.overrides = overrides or {}
        self.calls: list[dict[str, Any]] = []
        self._lock = Lock()
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs: Any) -> SimpleNamespace:
        prompt = kwargs["messages"][0]["content"]
        task = detect_task(prompt)
        with self._lock:
            self.calls.append({"task": task, **kwargs})
        answer = self.overrides.get(task, self._default(task))
        if callable(answer) and not isinstance(answer, BaseException):
            answer = answer(prompt)
        if isinstance(answer, BaseException):
            raise answer
        content = answer if isinstance(answer, str) else json.dumps(answer, ensure_ascii=False)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    @staticmethod
    def _default(task: str) -> dict:
        return {
            "client_summary": CLIENT_PAYLOAD,
            "accountant_summary": ACCOUNTANT_PAYLOAD,
            "tagging": TAGS_PAYLOAD,
        }[task]

    def tasks(self) -> list[str]:
        return [call["task"] for call in self.calls]


@pytest.fixture
def fake_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def ai_config() -> AIConfig:
    return AIConfig()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> Iterable[SQLiteDocumentStore]:
    store = SQLiteDocumentStore(SQLiteManager(), tmp_path / "store" / "subsidies.db")
    yield store
    store.close()


@pytest.fixture
def fanout_executor() -> Iterable[ThreadPoolExecutor]:
    executor = ThreadPoolExecutor(max_workers=3)
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def candidate_items() -> list[dict[str, str]]:
    return [
        {
            "name": "テスト補助金A",
            "url": "https://example.jp/subsidy/a.html",
            "snippet": "A の概要",
            "content": "補助金Aの本文。締切は2025年12月31日。",
        },
        {
            "name": "テスト補助金B",
            "url": "https://example.jp/subsidy/b.html",
            "snippet": "B の概要",
            "content": "補助金Bの本文。全業種対象。",
        },
    ]


@pytest.fixture
def make_pipeline(
    sqlite_store: SQLiteDocumentStore,
    fanout_executor: ThreadPoolExecutor,
    ai_config: AIConfig,
) -> Callable[..., SubsidyPipeline]:
    def _builder(
        client: FakeChatClient,
        items: Iterable[dict],
        *,
        fail_fast: bool = False,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], Any] | None = None,
    ) -> SubsidyPipeline:
        assembler_kwargs: dict[str, Any] = {}
        if id_factory is not None:
            assembler_kwargs["id_factory"] = id_factory
        if clock is not None:
            assembler_kwargs["clock"] = clock
        return SubsidyPipeline(
            source=StaticRecordSource(items),
            dedup=DeduplicationCheck(sqlite_store, COLLECTION),
            fanout=SummarizationFanout(Summarizer(client, ai_config), fanout_executor),
            assembler=RecordAssembler(sqlite_store, COLLECTION, **assembler_kwargs),
            fail_fast=fail_fast,
        )

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigRepository:
    monkeypatch.setenv("SUBSIDY_NAVIGATOR_HOME", str(tmp_path))
    return ConfigRepository(ConfigLocator(project_root=tmp_path))
