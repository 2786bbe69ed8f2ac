"""CacheManager: Fireboost API に対するキャッシュ操作の公開窓口"""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from typing import Any

from redis import Redis
from sqlalchemy import Engine

from .api import CacheApi, HttpCacheApi
from .config import API_KEY_ENV, FireboostConfig, create_token_store
from .coordinator import AuthCoordinator, AuthState
from .extractors import ApiKeyExtractor, CredentialExtractor
from .models import SetInput, Statistics
from .session_store import SessionTokenStore
from .store import TokenStore


class CacheManager:
    """キャッシュの保存・読み込み・削除。

    read_public_cache 以外の操作は必要時にログインし、認可エラー時は
    一度だけ再ログインして再試行する。その他のエラーはそのまま送出する。
    """

    def __init__(
        self,
        api: CacheApi,
        api_key_extractor: ApiKeyExtractor,
        credential_extractor: CredentialExtractor,
        store: TokenStore | None = None,
        api_key: str | None = None,
        config: FireboostConfig | None = None,
    ) -> None:
        config = config or FireboostConfig()
        self._api = api
        self._store = store if store is not None else SessionTokenStore()
        self._auth = AuthCoordinator(
            api=api,
            store=self._store,
            api_key_extractor=api_key_extractor,
            credential_extractor=credential_extractor,
            api_key=api_key or config.api_key or os.environ.get(API_KEY_ENV),
            max_login_attempts=config.max_login_attempts,
            api_url_template=config.api_url_template,
        )

    @classmethod
    def from_config(
        cls,
        config: FireboostConfig,
        api_key_extractor: ApiKeyExtractor,
        credential_extractor: CredentialExtractor,
        *,
        api: CacheApi | None = None,
        engine: Engine | None = None,
        redis_client: Redis | None = None,
        session: MutableMapping[str, Any] | None = None,
    ) -> CacheManager:
        """設定からストアと API クライアントを組み立てる。

        api を省略した場合は config.timeout_seconds を使う HttpCacheApi を生成する。
        """
        store = create_token_store(
            config, engine=engine, redis_client=redis_client, session=session
        )
        if api is None:
            api = HttpCacheApi(timeout_seconds=config.timeout_seconds)
        return cls(
            api,
            api_key_extractor,
            credential_extractor,
            store=store,
            config=config,
        )

    @property
    def api(self) -> CacheApi:
        return self._api

    @property
    def store(self) -> TokenStore:
        return self._store

    @property
    def auth_state(self) -> AuthState:
        return self._auth.state

    def save_cache(self, cache_key: str, content: Any, is_public: bool = False) -> Any:
        entry = SetInput(cache_key=cache_key, content=content, is_public=is_public)
        return self._auth.call(lambda ctx: self._api.set_cache(ctx, entry))

    def read_cache(self, cache_key: str) -> Any:
        return self._auth.call(lambda ctx: self._api.get_cache(ctx, cache_key))

    def delete_cache(self, cache_key: str) -> None:
        self._auth.call(lambda ctx: self._api.delete_cache(ctx, cache_key))

    def delete_all_cache(self) -> None:
        self._auth.call(self._api.delete_all_cache)

    def read_public_cache(self, cache_key: str) -> Any:
        """公開キャッシュを認証なしで取得する。"""
        return self._api.public_get_cache(self._auth.public_context(), cache_key)

    def get_statistics(self) -> Statistics:
        return self._auth.call(self._api.get_statistics)
