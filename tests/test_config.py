"""設定読み込みのユニットテスト"""

import textwrap

import pytest
from sqlalchemy import create_engine

from conftest import FakeRedis
from fireboost_sdk import (
    ConfigurationError,
    DatabaseTokenStore,
    FileTokenStore,
    FireboostConfig,
    FireboostErrorCodes,
    RedisTokenStore,
    SessionTokenStore,
    StorageSection,
    create_token_store,
    load_config,
)


def test_defaults(monkeypatch) -> None:
    """デフォルト値。"""
    monkeypatch.delenv("FIREBOOST_API_KEY", raising=False)
    config = FireboostConfig()
    assert config.api_key is None
    assert config.max_login_attempts == 3
    assert config.api_url_template == "https://{project}.api.fireboost.io"
    assert config.storage.backend == "session"
    assert config.storage.ttl == 3600


def test_api_key_falls_back_to_env(monkeypatch) -> None:
    """api_key 未指定時は環境変数を使うこと。"""
    monkeypatch.setenv("FIREBOOST_API_KEY", "from-env")
    assert FireboostConfig().api_key == "from-env"
    assert FireboostConfig(api_key="explicit").api_key == "explicit"


def test_load_config(tmp_path) -> None:
    """YAML から設定を読み込めること。"""
    path = tmp_path / "fireboost.yaml"
    path.write_text(
        textwrap.dedent(
            """
            api_key: yaml-key
            max_login_attempts: 5
            storage:
              backend: redis
              ttl: 120
            """
        )
    )
    config = load_config(path)
    assert config.api_key == "yaml-key"
    assert config.max_login_attempts == 5
    assert config.storage.backend == "redis"
    assert config.storage.ttl == 120


def test_load_config_missing_file(tmp_path) -> None:
    """ファイルがない場合は READ_FILE。"""
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(tmp_path / "missing.yaml")
    assert exc_info.value.code == FireboostErrorCodes.READ_FILE


def test_load_config_invalid_yaml(tmp_path) -> None:
    """不正な YAML は PARSE_YAML。"""
    path = tmp_path / "bad.yaml"
    path.write_text("storage: [unclosed")
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(path)
    assert exc_info.value.code == FireboostErrorCodes.PARSE_YAML


@pytest.mark.parametrize(
    "body",
    [
        "storage:\n  backend: memcached\n",
        "storage:\n  ttl: 0\n",
        "max_login_attempts: 0\n",
        "api_url_template: https://api.fireboost.io\n",
    ],
)
def test_load_config_validation_error(tmp_path, body: str) -> None:
    """値の検証エラーは VALIDATION。"""
    path = tmp_path / "invalid.yaml"
    path.write_text(body)
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(path)
    assert exc_info.value.code == FireboostErrorCodes.VALIDATION


def test_empty_file_uses_defaults(tmp_path) -> None:
    """空ファイルはデフォルト値になること。"""
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path).storage.backend == "session"


def test_create_session_store_with_session() -> None:
    """セッションを渡すとセッションストアを生成すること。"""
    session: dict = {}
    store = create_token_store(FireboostConfig(), session=session)
    assert isinstance(store, SessionTokenStore)
    store.store_token("jwt")
    assert session["fireboost_jwt_token"] == "jwt"


def test_create_file_store(tmp_path) -> None:
    """ファイルストアを生成すること。"""
    config = FireboostConfig(
        storage=StorageSection(backend="file", path=str(tmp_path), token_file_name="tok")
    )
    store = create_token_store(config)
    assert isinstance(store, FileTokenStore)
    store.store_token("jwt")
    assert (tmp_path / "tok").read_text() == "jwt"


def test_create_database_store(tmp_path) -> None:
    """データベースストアを生成すること。"""
    engine = create_engine(f"sqlite:///{tmp_path / 'db.sqlite'}")
    config = FireboostConfig(
        storage=StorageSection(backend="database", table_name="t", key_identifier="tenant")
    )
    store = create_token_store(config, engine=engine)
    assert isinstance(store, DatabaseTokenStore)
    assert store.key_identifier == "tenant"
    assert store.table.name == "t"
    engine.dispose()


def test_create_redis_store() -> None:
    """Redis ストアを生成すること。"""
    config = FireboostConfig(storage=StorageSection(backend="redis", ttl=30))
    store = create_token_store(config, redis_client=FakeRedis())
    assert isinstance(store, RedisTokenStore)
    assert store.ttl == 30


@pytest.mark.parametrize("backend", ["database", "redis"])
def test_create_store_without_handle(backend: str) -> None:
    """必要な接続が渡されない場合は ConfigurationError。"""
    config = FireboostConfig(storage=StorageSection(backend=backend))
    with pytest.raises(ConfigurationError):
        create_token_store(config)
