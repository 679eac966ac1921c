"""Schemas for candidate items, AI summaries and persisted subsidy records."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CandidateItem(BaseModel):
    """One search result waiting to be summarised. Never persisted."""

    name: str
    url: str
    snippet: str = ""
    content: str

    @field_validator("name", "url")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ClientSummary(BaseModel):
    """Business-owner facing summary."""

    model_config = ConfigDict(extra="ignore")

    catchphrase: str = Field(description="キャッチフレーズ")
    merit: str = Field(description="クライアントにとってのメリット")
    target: str = Field(description="対象者の主な条件")
    amount: str = Field(description="金額（例：最大250万円）")
    deadline: str = Field(description="締切（YYYY-MM-DD形式）")


class AccountantSummary(BaseModel):
    """Tax-accountant facing summary."""

    model_config = ConfigDict(extra="ignore")

    overview: str = Field(description="制度の概要")
    requirements: str = Field(description="適格要件（詳細）")
    expenses: str = Field(description="対象経費")
    pitfalls: str = Field(description="注意点・落とし穴")


class IndustryTags(BaseModel):
    model_config = ConfigDict(extra="ignore")

    industry_tags: list[str] = Field(
        description="産業タグ (例: 製造業, IT・情報通信業, 全業種対象)"
    )


class SubsidyRecord(BaseModel):
    """A persisted subsidy programme with both AI summaries."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    source_url: str
    deadline: datetime
    processed_date: datetime
    industry_tags: list[str]
    summary_for_client: ClientSummary
    summary_for_accountant: AccountantSummary

    def to_document(self) -> dict:
        """Return the JSON-compatible mapping written to the document store."""

        return self.model_dump(mode="json")


__all__ = [
    "AccountantSummary",
    "CandidateItem",
    "ClientSummary",
    "IndustryTags",
    "SubsidyRecord",
]
