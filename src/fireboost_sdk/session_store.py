"""セッションスコープのトークンストア"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

from .store import TokenStore


class SessionTokenStore(TokenStore):
    """プロセスまたはリクエスト単位のセッションに保持するトークンストア。

    マッピングは呼び出し側が所有する（Web フレームワークのセッションや dict）。
    加算は読み込み後に書き戻すため、並行書き込みに対しては安全でない。
    """

    def __init__(
        self,
        session: MutableMapping[str, Any] | None = None,
        session_key: str = "fireboost_jwt_token",
        login_attempt_key: str = "fireboost_login_attempts",
    ) -> None:
        super().__init__()
        self._session: MutableMapping[str, Any] = session if session is not None else {}
        self._session_key = session_key
        self._login_attempt_key = login_attempt_key

    def store_token(self, token: str) -> bool:
        def _store() -> bool:
            self._session[self._session_key] = token
            return True

        return self._guard("store_token", False, _store)

    def get_token(self) -> str | None:
        return self._guard("get_token", None, lambda: self._session.get(self._session_key))

    def clear_token(self) -> bool:
        def _clear() -> bool:
            self._session.pop(self._session_key, None)
            return True

        return self._guard("clear_token", False, _clear)

    def increment_login_attempt(self) -> int:
        def _increment() -> int:
            count = int(self._session.get(self._login_attempt_key, 0)) + 1
            self._session[self._login_attempt_key] = count
            return count

        return self._guard("increment_login_attempt", 0, _increment)

    def get_login_attempt_count(self) -> int:
        return self._guard(
            "get_login_attempt_count",
            0,
            lambda: int(self._session.get(self._login_attempt_key, 0)),
        )

    def reset_login_attempt_count(self) -> bool:
        def _reset() -> bool:
            self._session[self._login_attempt_key] = 0
            return True

        return self._guard("reset_login_attempt_count", False, _reset)
