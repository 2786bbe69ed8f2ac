"""Fireboost API のデータモデル"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class RequestContext:
    """呼び出しごとのリクエスト情報。接続先ホストと任意の Bearer トークン。"""

    host: str
    access_token: str | None = None

    @property
    def authorization(self) -> str | None:
        if not self.access_token:
            return None
        return f"Bearer {self.access_token}"


class LoginInput(BaseModel):
    """ログイン要求。フィールドは資格情報抽出器から渡される。"""

    model_config = ConfigDict(extra="allow")


class LoginOutput(BaseModel):
    """ログイン応答。"""

    model_config = ConfigDict(extra="allow")

    jwt_token: str


class SetInput(BaseModel):
    """キャッシュ保存要求。"""

    cache_key: str
    content: Any
    is_public: bool = False


class Statistics(BaseModel):
    """キャッシュ利用統計。"""

    model_config = ConfigDict(extra="allow")

    read: Any = None
    write: Any = None
