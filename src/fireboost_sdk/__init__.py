"""Fireboost キャッシュ SDK"""

from .api import CacheApi, HttpCacheApi
from .config import FireboostConfig, StorageSection, create_token_store, load_config
from .coordinator import AuthCoordinator, AuthState
from .database_store import DatabaseTokenStore
from .exceptions import (
    AuthBlockedError,
    BackendError,
    ConfigurationError,
    FireboostError,
    FireboostErrorCodes,
    TransientAuthError,
    UpstreamError,
)
from .extractors import ApiKeyExtractor, CredentialExtractor
from .file_store import FileTokenStore
from .manager import CacheManager
from .models import LoginInput, LoginOutput, RequestContext, SetInput, Statistics
from .redis_store import RedisTokenStore
from .session_store import SessionTokenStore
from .store import TokenStore

__all__ = [
    "ApiKeyExtractor",
    "AuthBlockedError",
    "AuthCoordinator",
    "AuthState",
    "BackendError",
    "CacheApi",
    "CacheManager",
    "ConfigurationError",
    "CredentialExtractor",
    "DatabaseTokenStore",
    "FileTokenStore",
    "FireboostConfig",
    "FireboostError",
    "FireboostErrorCodes",
    "HttpCacheApi",
    "LoginInput",
    "LoginOutput",
    "RedisTokenStore",
    "RequestContext",
    "SessionTokenStore",
    "SetInput",
    "Statistics",
    "StorageSection",
    "TokenStore",
    "TransientAuthError",
    "UpstreamError",
    "create_token_store",
    "load_config",
]
