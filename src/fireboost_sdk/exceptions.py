"""fireboost_sdk の例外型定義"""

from __future__ import annotations


class FireboostError(Exception):
    """fireboost_sdk のエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class FireboostErrorCodes:
    """FireboostError のエラーコード定数。"""

    MISSING_API_KEY: str = "MISSING_API_KEY"
    INVALID_API_KEY: str = "INVALID_API_KEY"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
    STORAGE_UNAVAILABLE: str = "STORAGE_UNAVAILABLE"
    LOGIN_BLOCKED: str = "LOGIN_BLOCKED"
    UNAUTHORIZED: str = "UNAUTHORIZED"
    REQUEST_FAILED: str = "REQUEST_FAILED"
    INVALID_RESPONSE: str = "INVALID_RESPONSE"


class ConfigurationError(FireboostError):
    """API キーや設定が不正な場合のエラー。リトライしない。"""


class AuthBlockedError(FireboostError):
    """ログイン試行回数の上限に達した場合のエラー。"""

    MESSAGE = (
        "Please verify your API key. Something is wrong with the key. "
        "Please contact the Fireboost support for assistance."
    )

    def __init__(self, attempts: int) -> None:
        super().__init__(FireboostErrorCodes.LOGIN_BLOCKED, self.MESSAGE)
        self.attempts = attempts


class TransientAuthError(FireboostError):
    """一度きりの認可失敗 (HTTP 401)。"""

    def __init__(self, message: str = "Unauthorized", cause: Exception | None = None) -> None:
        super().__init__(FireboostErrorCodes.UNAUTHORIZED, message, cause)


class BackendError(FireboostError):
    """トークンストレージの I/O 失敗。呼び出し元には送出されず記録のみ。"""

    def __init__(self, operation: str, cause: Exception) -> None:
        super().__init__(
            FireboostErrorCodes.STORAGE_UNAVAILABLE,
            f"Token storage operation failed: {operation}: {cause}",
            cause,
        )
        self.operation = operation


class UpstreamError(FireboostError):
    """認可以外のリモート API エラー。"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str = FireboostErrorCodes.REQUEST_FAILED,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code, message, cause)
        self.status_code = status_code
