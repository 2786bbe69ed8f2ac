"""遅延ログインと認可エラー時の再試行"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TypeVar

import structlog

from .api import CacheApi
from .config import DEFAULT_API_URL_TEMPLATE
from .exceptions import (
    AuthBlockedError,
    ConfigurationError,
    FireboostErrorCodes,
    TransientAuthError,
    UpstreamError,
)
from .extractors import ApiKeyExtractor, CredentialExtractor
from .models import LoginInput, RequestContext
from .store import TokenStore

T = TypeVar("T")

logger = structlog.stdlib.get_logger(__name__)


class AuthState(Enum):
    """トークンストアから導かれる認証状態。"""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    LOGIN_BLOCKED = "login_blocked"


class AuthCoordinator:
    """1 つの API キーについてトークンの取得・再利用・再ログインを管理する。

    ログイン試行回数はリモート呼び出しの前にストアへ記録し、ログイン成功時にだけ
    リセットする。回数が ``max_login_attempts`` に達すると、外部でリセットされる
    まで全てのログインが AuthBlockedError で失敗する。
    """

    def __init__(
        self,
        api: CacheApi,
        store: TokenStore,
        api_key_extractor: ApiKeyExtractor,
        credential_extractor: CredentialExtractor,
        api_key: str | None,
        max_login_attempts: int = 3,
        api_url_template: str = DEFAULT_API_URL_TEMPLATE,
    ) -> None:
        self._api = api
        self._store = store
        self._api_key_extractor = api_key_extractor
        self._credential_extractor = credential_extractor
        self._api_key = api_key
        self._max_login_attempts = max_login_attempts
        self._api_url_template = api_url_template

    @property
    def store(self) -> TokenStore:
        return self._store

    @property
    def state(self) -> AuthState:
        if self._store.get_login_attempt_count() >= self._max_login_attempts:
            return AuthState.LOGIN_BLOCKED
        if self._store.has_token():
            return AuthState.AUTHENTICATED
        return AuthState.UNAUTHENTICATED

    def _require_api_key(self, purpose: str) -> str:
        if not self._api_key:
            raise ConfigurationError(
                code=FireboostErrorCodes.MISSING_API_KEY,
                message=f"API key is required {purpose}",
            )
        return self._api_key

    def api_url(self) -> str:
        """API キーのプロジェクトから接続先ホストを組み立てる。

        呼び出しごとに再計算し、キーの情報はキャッシュしない。
        """
        api_key = self._require_api_key("to determine API URL")
        try:
            payload = self._api_key_extractor.get_api_key_payload(api_key)
        except Exception as e:
            raise ConfigurationError(
                code=FireboostErrorCodes.INVALID_API_KEY,
                message=f"Invalid API key: {e}",
                cause=e,
            ) from e
        project = payload.get("project") if payload else None
        if not project:
            raise ConfigurationError(
                code=FireboostErrorCodes.INVALID_API_KEY,
                message="Invalid API key: missing project information",
            )
        return self._api_url_template.replace("{project}", str(project))

    def login(self) -> None:
        """ログインし、返されたトークンを保存する。

        Raises:
            ConfigurationError: API キーがない、または利用できない場合
            AuthBlockedError: 試行回数の上限に達している場合
            TransientAuthError, UpstreamError: ログイン呼び出しが失敗した場合
        """
        api_key = self._require_api_key("for login")

        attempts = self._store.get_login_attempt_count()
        if attempts >= self._max_login_attempts:
            logger.warning("login blocked", attempts=attempts)
            raise AuthBlockedError(attempts)

        attempt = self._store.increment_login_attempt()
        ctx = RequestContext(host=self.api_url())
        try:
            credentials = LoginInput.model_validate(
                dict(self._credential_extractor.get_login_input_data(api_key))
            )
        except Exception as e:
            raise ConfigurationError(
                code=FireboostErrorCodes.INVALID_API_KEY,
                message=f"Invalid API key: cannot extract credentials: {e}",
                cause=e,
            ) from e

        logger.info("logging in", host=ctx.host, attempt=attempt)
        output = self._api.login(ctx, credentials)
        if not output.jwt_token:
            raise UpstreamError(
                message="Login response did not contain a token",
                code=FireboostErrorCodes.INVALID_RESPONSE,
            )
        self._store.store_token(output.jwt_token)
        self._store.reset_login_attempt_count()
        logger.info("login succeeded", host=ctx.host)

    def ensure_authenticated(self) -> None:
        """ストアにトークンがなければログインする。"""
        if not self._store.has_token():
            self.login()

    def context(self) -> RequestContext:
        return RequestContext(host=self.api_url(), access_token=self._store.get_token())

    def public_context(self) -> RequestContext:
        """認証なし呼び出し用のコンテキスト。Bearer トークンは持たない。"""
        return RequestContext(host=self.api_url(), access_token=None)

    def call(self, operation: Callable[[RequestContext], T]) -> T:
        """認証付きの操作を実行する。

        認可エラー時は一度だけ再ログインして再試行する。
        再試行でも認可エラーならそのまま送出する。
        """
        self.ensure_authenticated()
        try:
            return operation(self.context())
        except TransientAuthError as e:
            logger.info("authorization expired, logging in again", error=str(e))
        self.login()
        return operation(self.context())
