"""Fireboost API クライアント"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .exceptions import FireboostErrorCodes, TransientAuthError, UpstreamError
from .models import LoginInput, LoginOutput, RequestContext, SetInput, Statistics


class CacheApi(ABC):
    """Fireboost API クライアント抽象基底クラス。

    認可失敗 (HTTP 401) は TransientAuthError、それ以外の失敗は
    UpstreamError として送出する。
    """

    @abstractmethod
    def login(self, ctx: RequestContext, credentials: LoginInput) -> LoginOutput: ...

    @abstractmethod
    def get_cache(self, ctx: RequestContext, cache_key: str) -> Any: ...

    @abstractmethod
    def set_cache(self, ctx: RequestContext, entry: SetInput) -> Any: ...

    @abstractmethod
    def delete_cache(self, ctx: RequestContext, cache_key: str) -> None: ...

    @abstractmethod
    def delete_all_cache(self, ctx: RequestContext) -> None: ...

    @abstractmethod
    def get_statistics(self, ctx: RequestContext) -> Statistics: ...

    @abstractmethod
    def public_get_cache(self, ctx: RequestContext, cache_key: str) -> Any: ...


class HttpCacheApi(CacheApi):
    """httpx を使った CacheApi 実装。"""

    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self._timeout = timeout_seconds

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    def _request(
        self,
        ctx: RequestContext,
        method: str,
        path: str,
        json: Any = None,
    ) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if ctx.authorization is not None:
            headers["Authorization"] = ctx.authorization
        try:
            with httpx.Client(base_url=ctx.host, timeout=self._timeout) as client:
                resp = client.request(method, path, json=json, headers=headers)
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                raise TransientAuthError(
                    message=f"{method} {path}: HTTP 401", cause=e
                ) from e
            raise UpstreamError(
                message=f"{method} {path} failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(message=f"{method} {path} failed: {e}", cause=e) from e

    @staticmethod
    def _body(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    @staticmethod
    def _cache_path(cache_key: str) -> str:
        return f"/cache/{quote(cache_key, safe='')}"

    def login(self, ctx: RequestContext, credentials: LoginInput) -> LoginOutput:
        resp = self._request(ctx, "POST", "/auth/login", json=credentials.model_dump())
        try:
            return LoginOutput.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(
                message=f"Invalid login response: {e}",
                status_code=resp.status_code,
                code=FireboostErrorCodes.INVALID_RESPONSE,
                cause=e,
            ) from e

    def get_cache(self, ctx: RequestContext, cache_key: str) -> Any:
        return self._body(self._request(ctx, "GET", self._cache_path(cache_key)))

    def set_cache(self, ctx: RequestContext, entry: SetInput) -> Any:
        return self._body(self._request(ctx, "POST", "/cache", json=entry.model_dump()))

    def delete_cache(self, ctx: RequestContext, cache_key: str) -> None:
        self._request(ctx, "DELETE", self._cache_path(cache_key))

    def delete_all_cache(self, ctx: RequestContext) -> None:
        self._request(ctx, "DELETE", "/cache")

    def get_statistics(self, ctx: RequestContext) -> Statistics:
        resp = self._request(ctx, "GET", "/tracking")
        try:
            return Statistics.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(
                message=f"Invalid statistics response: {e}",
                status_code=resp.status_code,
                code=FireboostErrorCodes.INVALID_RESPONSE,
                cause=e,
            ) from e

    def public_get_cache(self, ctx: RequestContext, cache_key: str) -> Any:
        return self._body(
            self._request(ctx, "GET", f"/public/cache/{quote(cache_key, safe='')}")
        )
