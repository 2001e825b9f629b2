from typing import Any

from pydantic import BaseModel


class ChatRequest(BaseModel):
    # форму сообщений проверяет OpenRouter, здесь только наличие
    messages: Any
    temperature: Any = 0.8
    top_p: Any = 1


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class AccountSummary(BaseModel):
    label: str
    usage: float
    limit: float
    is_free_tier: bool
    rate_limit: dict

    @classmethod
    def from_key_info(cls, data: dict) -> "AccountSummary":
        return cls(
            label=data.get("label") or "Unknown",
            usage=data.get("usage") or 0,
            limit=data.get("limit") or 0,
            is_free_tier=data.get("is_free_tier") or False,
            rate_limit=data.get("rate_limit") or {},
        )


class UsageSummary(BaseModel):
    used: float
    limit: float
    remaining: float
    percentage_used: str
    currency: str = "USD"

    @classmethod
    def from_key_info(cls, data: dict) -> "UsageSummary":
        used = data.get("usage") or 0
        limit = data.get("limit") or 0
        percentage = used / limit * 100 if limit > 0 else 0
        return cls(
            used=used,
            limit=limit,
            remaining=max(0, limit - used),
            percentage_used=f"{percentage:.2f}",
        )
