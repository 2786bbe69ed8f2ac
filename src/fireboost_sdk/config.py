"""設定型定義と読み込み"""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from redis import Redis
from sqlalchemy import Engine

from .database_store import DatabaseTokenStore
from .exceptions import ConfigurationError, FireboostErrorCodes
from .file_store import FileTokenStore
from .redis_store import RedisTokenStore
from .session_store import SessionTokenStore
from .store import TokenStore

API_KEY_ENV = "FIREBOOST_API_KEY"
DEFAULT_API_URL_TEMPLATE = "https://{project}.api.fireboost.io"


class StorageSection(BaseModel):
    """トークンストレージ設定。"""

    backend: Literal["session", "file", "database", "redis"] = "session"
    # file
    path: str | None = None
    token_file_name: str = "fireboost_token"
    login_attempts_file_name: str = "fireboost_login_attempts"
    # database
    table_name: str = "fireboost_tokens"
    key_identifier: str = "default"
    # redis
    token_key: str = "fireboost:jwt_token:"
    login_attempt_key: str = "fireboost:login_attempts:"
    ttl: int = Field(default=3600, gt=0)
    # session
    session_key: str = "fireboost_jwt_token"
    session_login_attempt_key: str = "fireboost_login_attempts"


class FireboostConfig(BaseModel):
    """SDK 設定全体。"""

    api_key: str | None = None
    api_url_template: str = DEFAULT_API_URL_TEMPLATE
    timeout_seconds: float = Field(default=10.0, gt=0)
    max_login_attempts: int = Field(default=3, ge=1)
    storage: StorageSection = Field(default_factory=StorageSection)

    @model_validator(mode="after")
    def _api_key_from_env(self) -> FireboostConfig:
        if not self.api_key:
            self.api_key = os.environ.get(API_KEY_ENV) or None
        if "{project}" not in self.api_url_template:
            raise ValueError("api_url_template must contain '{project}'")
        return self


def load_config(path: Path) -> FireboostConfig:
    """YAML 設定ファイルを読み込んで FireboostConfig を返す。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            code=FireboostErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            code=FireboostErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    try:
        return FireboostConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            code=FireboostErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e


def create_token_store(
    config: FireboostConfig,
    *,
    engine: Engine | None = None,
    redis_client: Redis | None = None,
    session: MutableMapping[str, Any] | None = None,
) -> TokenStore:
    """設定に応じた TokenStore を生成する。

    データベースと Redis の接続は呼び出し元が渡す。ストアは接続を保持する
    だけで、生成も破棄もしない。
    """
    storage = config.storage
    if storage.backend == "file":
        return FileTokenStore(
            storage.path,
            token_file_name=storage.token_file_name,
            login_attempts_file_name=storage.login_attempts_file_name,
        )
    if storage.backend == "database":
        if engine is None:
            raise ConfigurationError(
                code=FireboostErrorCodes.VALIDATION,
                message="database storage requires an engine",
            )
        return DatabaseTokenStore(
            engine, table_name=storage.table_name, key_identifier=storage.key_identifier
        )
    if storage.backend == "redis":
        if redis_client is None:
            raise ConfigurationError(
                code=FireboostErrorCodes.VALIDATION,
                message="redis storage requires a client",
            )
        return RedisTokenStore(
            redis_client,
            token_key=storage.token_key,
            login_attempt_key=storage.login_attempt_key,
            ttl=storage.ttl,
        )
    return SessionTokenStore(
        session,
        session_key=storage.session_key,
        login_attempt_key=storage.session_login_attempt_key,
    )
