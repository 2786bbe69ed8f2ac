"""TokenStore 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TypeVar

import structlog

from .exceptions import BackendError

T = TypeVar("T")

logger = structlog.stdlib.get_logger(__name__)


class TokenStore(ABC):
    """トークンとログイン試行回数の永続化抽象基底クラス。

    どの操作も呼び出し元に例外を送出しない。ストレージ障害は安全な既定値
    (False / 0 / None) に置き換えられ、``last_error`` に記録される。
    """

    persistent: bool = False
    shared: bool = False
    atomic_increment: bool = False

    def __init__(self) -> None:
        self.last_error: BackendError | None = None

    @abstractmethod
    def store_token(self, token: str) -> bool:
        """トークンを保存する。成功したら True。"""
        ...

    @abstractmethod
    def get_token(self) -> str | None:
        """保存済みトークンを取得する。存在しなければ None。"""
        ...

    @abstractmethod
    def clear_token(self) -> bool:
        """トークンを削除する。何も保存されていなくても True。"""
        ...

    def has_token(self) -> bool:
        """空でないトークンが保存されているか確認する。"""
        token = self.get_token()
        return token is not None and token != ""

    @abstractmethod
    def increment_login_attempt(self) -> int:
        """ログイン試行回数を 1 増やし、新しい値を返す。"""
        ...

    @abstractmethod
    def get_login_attempt_count(self) -> int:
        """現在のログイン試行回数を返す。"""
        ...

    @abstractmethod
    def reset_login_attempt_count(self) -> bool:
        """ログイン試行回数を 0 に戻す。"""
        ...

    def _guard(self, operation: str, default: T, fn: Callable[[], T]) -> T:
        try:
            result = fn()
        except Exception as e:
            self.last_error = BackendError(operation, e)
            logger.warning(
                "token storage degraded",
                store=type(self).__name__,
                operation=operation,
                error=str(e),
            )
            return default
        self.last_error = None
        return result
