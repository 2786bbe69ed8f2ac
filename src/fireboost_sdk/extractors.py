"""API キー抽出器の抽象"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class ApiKeyExtractor(ABC):
    """API キーからルーティング情報（最低限 ``project``）を取り出す。"""

    @abstractmethod
    def get_api_key_payload(self, api_key: str) -> Mapping[str, Any]: ...


class CredentialExtractor(ABC):
    """API キーからログイン要求の内容を取り出す。"""

    @abstractmethod
    def get_login_input_data(self, api_key: str) -> Mapping[str, Any]: ...
