"""Record sources supplying candidate subsidy items."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from ..config import SourceSettings, read_data_file
from ..errors import ConfigError
from .records import CandidateItem

# Stand-in for a search API integration.
MOCK_SEARCH_RESULTS: tuple[dict[str, str], ...] = (
    {
        "name": "神奈川県 ものづくりDX支援補助金 (モック)",
        "url": "https://www.pref.kanagawa.jp/docs/mock/dx-hojo.html",
        "snippet": "神奈川県内の製造業のDX（デジタルトランスフォーメーション）を支援します。最大250万円...",
        "content": (
            "神奈川県 ものづくりDX支援補助金。この補助金は、県内の中小企業が行うIoT、AI導入などの"
            "DXの取り組みを支援するものです。対象経費は、ソフトウェア導入費、コンサルティング費用など。"
            "適格要件として、県内に事業所を有すること、常時雇用する従業員が5名以上であること。"
            "注意点として、他の国・県の補助金との併用は不可。締切は2025年12月31日です。"
            "金額は最大250万円（補助率1/2）。対象者は製造業を営む中小企業。"
        ),
    },
    {
        "name": "神奈川県 IT導入サポート助成金 (モック)",
        "url": "https://www.pref.kanagawa.jp/docs/mock/it-support.html",
        "snippet": "神奈川県内の全業種の中小企業を対象に、ITツールの導入をサポートします。最大50万円...",
        "content": (
            "神奈川県 IT導入サポート助成金。テレワーク導入、ECサイト構築など、IT化を支援。全業種対象。"
            "金額は最大50万円（補助率2/3）。締切は2025年11月30日。要件は、県内での事業実態があること。"
            "経費はツール利用料、ECサイト構築費など。比較的申請しやすいが、予算上限に達し次第終了と"
            "なるため注意が必要。"
        ),
    },
)


class RecordSource(ABC):
    """Ordered supplier of candidate items."""

    @abstractmethod
    def candidates(self) -> list[CandidateItem]:
        """Return candidates in processing order."""


class StaticRecordSource(RecordSource):
    """Serve a fixed list of candidates (the built-in mock list by default)."""

    def __init__(self, items: Iterable[dict | CandidateItem] | None = None) -> None:
        raw = MOCK_SEARCH_RESULTS if items is None else tuple(items)
        self._items = [
            item if isinstance(item, CandidateItem) else CandidateItem.model_validate(item)
            for item in raw
        ]

    def candidates(self) -> list[CandidateItem]:
        return list(self._items)


class FileRecordSource(RecordSource):
    """Read candidates from a YAML/JSON list, or a mapping with ``candidates``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def candidates(self) -> list[CandidateItem]:
        if not self.path.exists():
            raise ConfigError(f"Candidates file not found: {self.path}")
        data = read_data_file(self.path)
        if isinstance(data, dict):
            data = data.get("candidates")
        if not isinstance(data, list):
            raise ConfigError(f"Candidates file must contain a list: {self.path}")
        items: list[CandidateItem] = []
        for index, entry in enumerate(data):
            try:
                items.append(CandidateItem.model_validate(entry))
            except ValidationError as exc:
                raise ConfigError(f"Invalid candidate #{index} in {self.path}:\n{exc}") from exc
        return items


def build_record_source(settings: SourceSettings, base_dir: Path) -> RecordSource:
    if settings.type == "file":
        path = settings.path
        if not path.is_absolute():
            path = (base_dir / path).resolve()
        return FileRecordSource(path)
    return StaticRecordSource()


__all__ = [
    "FileRecordSource",
    "MOCK_SEARCH_RESULTS",
    "RecordSource",
    "StaticRecordSource",
    "build_record_source",
]
