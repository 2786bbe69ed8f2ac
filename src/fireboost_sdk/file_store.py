"""FileTokenStore 実装"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from .exceptions import ConfigurationError, FireboostErrorCodes
from .store import TokenStore


class FileTokenStore(TokenStore):
    """ローカルファイルにトークンと試行回数を保存するストア。

    単一ホスト向け。試行回数の更新は read-modify-write のため、複数プロセス
    からの同時書き込みでは更新が失われることがある。
    """

    persistent = True

    def __init__(
        self,
        storage_path: str | Path | None = None,
        token_file_name: str = "fireboost_token",
        login_attempts_file_name: str = "fireboost_login_attempts",
    ) -> None:
        super().__init__()
        self._storage_path = Path(storage_path) if storage_path is not None else Path(tempfile.gettempdir())
        self._token_path = self._storage_path / token_file_name
        self._attempts_path = self._storage_path / login_attempts_file_name
        self._ensure_storage_directory()

    @property
    def token_path(self) -> Path:
        return self._token_path

    @property
    def login_attempts_path(self) -> Path:
        return self._attempts_path

    def _ensure_storage_directory(self) -> None:
        try:
            self._storage_path.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                code=FireboostErrorCodes.VALIDATION,
                message=f"Failed to create storage directory: {self._storage_path}",
                cause=e,
            ) from e
        if not os.access(self._storage_path, os.W_OK):
            raise ConfigurationError(
                code=FireboostErrorCodes.VALIDATION,
                message=f"Storage directory is not writable: {self._storage_path}",
            )

    def store_token(self, token: str) -> bool:
        def _store() -> bool:
            self._token_path.write_text(token, encoding="utf-8")
            return True

        return self._guard("store_token", False, _store)

    def get_token(self) -> str | None:
        def _get() -> str | None:
            if not self._token_path.exists():
                return None
            return self._token_path.read_text(encoding="utf-8")

        return self._guard("get_token", None, _get)

    def clear_token(self) -> bool:
        def _clear() -> bool:
            self._token_path.unlink(missing_ok=True)
            return True

        return self._guard("clear_token", False, _clear)

    def increment_login_attempt(self) -> int:
        def _increment() -> int:
            count = self._read_count() + 1
            self._attempts_path.write_text(str(count), encoding="utf-8")
            return count

        return self._guard("increment_login_attempt", 0, _increment)

    def get_login_attempt_count(self) -> int:
        return self._guard("get_login_attempt_count", 0, self._read_count)

    def reset_login_attempt_count(self) -> bool:
        def _reset() -> bool:
            self._attempts_path.write_text("0", encoding="utf-8")
            return True

        return self._guard("reset_login_attempt_count", False, _reset)

    def _read_count(self) -> int:
        if not self._attempts_path.exists():
            return 0
        content = self._attempts_path.read_text(encoding="utf-8").strip()
        return int(content) if content else 0
