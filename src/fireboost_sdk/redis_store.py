"""RedisTokenStore 実装"""

from __future__ import annotations

import redis

from .store import TokenStore


def _decode(value: bytes | str | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisTokenStore(TokenStore):
    """Redis にトークンと試行回数を保存するストア。

    トークンと試行回数はそれぞれ独立した TTL を持つため、片方だけが
    期限切れになることがある。キーは固定で、key_identifier によるテナント
    分離は行わない。クライアントの接続と切断は呼び出し元の責務。
    """

    persistent = True
    shared = True
    atomic_increment = True

    def __init__(
        self,
        client: redis.Redis,
        token_key: str = "fireboost:jwt_token:",
        login_attempt_key: str = "fireboost:login_attempts:",
        ttl: int = 3600,
    ) -> None:
        super().__init__()
        self._client = client
        self._token_key = token_key
        self._login_attempt_key = login_attempt_key
        self._ttl = ttl

    @property
    def ttl(self) -> int:
        return self._ttl

    def store_token(self, token: str) -> bool:
        return self._guard(
            "store_token",
            False,
            lambda: bool(self._client.set(self._token_key, token, ex=self._ttl)),
        )

    def get_token(self) -> str | None:
        return self._guard(
            "get_token", None, lambda: _decode(self._client.get(self._token_key))
        )

    def clear_token(self) -> bool:
        def _clear() -> bool:
            self._client.delete(self._token_key)
            return True

        return self._guard("clear_token", False, _clear)

    def increment_login_attempt(self) -> int:
        def _increment() -> int:
            count = int(self._client.incr(self._login_attempt_key))
            self._client.expire(self._login_attempt_key, self._ttl)
            return count

        return self._guard("increment_login_attempt", 0, _increment)

    def get_login_attempt_count(self) -> int:
        def _get() -> int:
            count = _decode(self._client.get(self._login_attempt_key))
            return int(count) if count is not None else 0

        return self._guard("get_login_attempt_count", 0, _get)

    def reset_login_attempt_count(self) -> bool:
        return self._guard(
            "reset_login_attempt_count",
            False,
            lambda: bool(self._client.set(self._login_attempt_key, 0, ex=self._ttl)),
        )
