"""共通フィクスチャとテストダブル"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

import pytest

from fireboost_sdk import (
    ApiKeyExtractor,
    CacheApi,
    CredentialExtractor,
    LoginInput,
    LoginOutput,
    RequestContext,
    SetInput,
    Statistics,
    TransientAuthError,
)

API_KEY = "fb-test-key"
PROJECT = "acme"
HOST = f"https://{PROJECT}.api.fireboost.io"


class StaticApiKeyExtractor(ApiKeyExtractor):
    def __init__(self, payload: Mapping[str, Any] | None = None) -> None:
        self.payload = {"project": PROJECT} if payload is None else payload
        self.calls = 0

    def get_api_key_payload(self, api_key: str) -> Mapping[str, Any]:
        self.calls += 1
        return self.payload


class StaticCredentialExtractor(CredentialExtractor):
    def get_login_input_data(self, api_key: str) -> Mapping[str, Any]:
        return {"client_id": "client", "secret": f"secret-for-{api_key}"}


class FakeCacheApi(CacheApi):
    """呼び出しを記録し、操作ごとに用意した結果をキューから順に返す。"""

    def __init__(self) -> None:
        self.calls: list[tuple[str, RequestContext]] = []
        self.login_tokens: list[str | Exception] = []
        self.outcomes: dict[str, list[Any]] = {}
        self._token_seq = 0

    def script(self, operation: str, *outcomes: Any) -> None:
        self.outcomes.setdefault(operation, []).extend(outcomes)

    def _next(self, operation: str, ctx: RequestContext, default: Any = None) -> Any:
        self.calls.append((operation, ctx))
        queue = self.outcomes.get(operation)
        outcome = queue.pop(0) if queue else default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    def login(self, ctx: RequestContext, credentials: LoginInput) -> LoginOutput:
        self.calls.append(("login", ctx))
        if self.login_tokens:
            outcome = self.login_tokens.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return LoginOutput(jwt_token=outcome)
        self._token_seq += 1
        return LoginOutput(jwt_token=f"jwt-{self._token_seq}")

    def get_cache(self, ctx: RequestContext, cache_key: str) -> Any:
        return self._next("get_cache", ctx, {"cache_key": cache_key, "content": "cached"})

    def set_cache(self, ctx: RequestContext, entry: SetInput) -> Any:
        return self._next("set_cache", ctx, {"status": "ok", "cache_key": entry.cache_key})

    def delete_cache(self, ctx: RequestContext, cache_key: str) -> None:
        self._next("delete_cache", ctx)

    def delete_all_cache(self, ctx: RequestContext) -> None:
        self._next("delete_all_cache", ctx)

    def get_statistics(self, ctx: RequestContext) -> Statistics:
        return self._next("get_statistics", ctx, Statistics(read=1, write=2))

    def public_get_cache(self, ctx: RequestContext, cache_key: str) -> Any:
        return self._next("public_get_cache", ctx, {"cache_key": cache_key, "content": "public"})


def unauthorized() -> TransientAuthError:
    return TransientAuthError("HTTP 401")


class FakeRedis:
    """時計を差し替えられる最小限の同期 Redis ダブル。"""

    def __init__(self, decode_responses: bool = False) -> None:
        self.now = 0.0
        self.decode_responses = decode_responses
        self._data: dict[str, tuple[bytes, float | None]] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> bytes | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.now >= expires_at:
            del self._data[key]
            return None
        return value

    def _out(self, value: bytes | None) -> bytes | str | None:
        if value is None or not self.decode_responses:
            return value
        return value.decode("utf-8")

    def set(self, key: str, value: Any, ex: int | None = None) -> bool:
        with self._lock:
            expires_at = self.now + ex if ex is not None else None
            self._data[key] = (str(value).encode("utf-8"), expires_at)
            return True

    def get(self, key: str) -> bytes | str | None:
        with self._lock:
            return self._out(self._live(key))

    def delete(self, *keys: str) -> int:
        with self._lock:
            removed = 0
            for key in keys:
                if self._live(key) is not None:
                    del self._data[key]
                    removed += 1
            return removed

    def incr(self, key: str) -> int:
        with self._lock:
            current = self._live(key)
            count = int(current) + 1 if current is not None else 1
            expires_at = self._data[key][1] if key in self._data else None
            self._data[key] = (str(count).encode("utf-8"), expires_at)
            return count

    def expire(self, key: str, seconds: int) -> bool:
        with self._lock:
            value = self._live(key)
            if value is None:
                return False
            self._data[key] = (value, self.now + seconds)
            return True


class BrokenRedis:
    """全コマンドが接続断のように失敗する Redis ダブル。"""

    def __getattr__(self, name: str) -> Any:
        def _fail(*args: Any, **kwargs: Any) -> Any:
            raise ConnectionError("Connection refused")

        return _fail


@pytest.fixture
def api() -> FakeCacheApi:
    return FakeCacheApi()


@pytest.fixture
def api_key_extractor() -> StaticApiKeyExtractor:
    return StaticApiKeyExtractor()


@pytest.fixture
def credential_extractor() -> StaticCredentialExtractor:
    return StaticCredentialExtractor()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
