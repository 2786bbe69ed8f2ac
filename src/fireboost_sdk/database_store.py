"""DatabaseTokenStore 実装"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    Engine,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError

from .store import TokenStore


def _tokens_table(table_name: str) -> Table:
    return Table(
        table_name,
        MetaData(),
        Column("id", String(255), primary_key=True),
        Column("token", Text, nullable=True),
        Column("login_attempts", Integer, nullable=False, server_default="0"),
        Column("created_at", DateTime, server_default=func.current_timestamp()),
        Column("updated_at", DateTime, server_default=func.current_timestamp()),
    )


class DatabaseTokenStore(TokenStore):
    """リレーショナルテーブルにトークンを保存するストア。

    key_identifier ごとに 1 行。試行回数の加算は単一の UPDATE 文で行うため
    複数プロセスから同時に呼ばれても更新は失われない。Engine の生成と破棄は
    呼び出し元の責務。
    """

    persistent = True
    shared = True
    atomic_increment = True

    def __init__(
        self,
        engine: Engine,
        table_name: str = "fireboost_tokens",
        key_identifier: str = "default",
    ) -> None:
        super().__init__()
        self._engine = engine
        self._key_identifier = key_identifier
        self._table = _tokens_table(table_name)
        self._guard("create_table", None, self._create_table)

    @property
    def table(self) -> Table:
        return self._table

    @property
    def key_identifier(self) -> str:
        return self._key_identifier

    def _create_table(self) -> None:
        self._table.metadata.create_all(self._engine, checkfirst=True)

    def _ensure_record_exists(self) -> None:
        stmt = select(self._table.c.id).where(self._table.c.id == self._key_identifier)
        with self._engine.connect() as conn:
            if conn.execute(stmt).first() is not None:
                return
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    insert(self._table).values(
                        id=self._key_identifier, token=None, login_attempts=0
                    )
                )
        except IntegrityError:
            # 他のプロセスが先に作成した
            pass

    def _update(self, **values: object) -> bool:
        stmt = (
            update(self._table)
            .where(self._table.c.id == self._key_identifier)
            .values(updated_at=func.current_timestamp(), **values)
        )
        with self._engine.begin() as conn:
            conn.execute(stmt)
        return True

    def store_token(self, token: str) -> bool:
        def _store() -> bool:
            self._ensure_record_exists()
            return self._update(token=token)

        return self._guard("store_token", False, _store)

    def get_token(self) -> str | None:
        def _get() -> str | None:
            stmt = select(self._table.c.token).where(self._table.c.id == self._key_identifier)
            with self._engine.connect() as conn:
                token = conn.execute(stmt).scalar_one_or_none()
            return token or None

        return self._guard("get_token", None, _get)

    def clear_token(self) -> bool:
        return self._guard("clear_token", False, lambda: self._update(token=None))

    def increment_login_attempt(self) -> int:
        def _increment() -> int:
            self._ensure_record_exists()
            with self._engine.begin() as conn:
                conn.execute(
                    update(self._table)
                    .where(self._table.c.id == self._key_identifier)
                    .values(
                        login_attempts=self._table.c.login_attempts + 1,
                        updated_at=func.current_timestamp(),
                    )
                )
                count = conn.execute(
                    select(self._table.c.login_attempts).where(
                        self._table.c.id == self._key_identifier
                    )
                ).scalar_one()
            return int(count)

        return self._guard("increment_login_attempt", 0, _increment)

    def get_login_attempt_count(self) -> int:
        def _get() -> int:
            stmt = select(self._table.c.login_attempts).where(
                self._table.c.id == self._key_identifier
            )
            with self._engine.connect() as conn:
                count = conn.execute(stmt).scalar_one_or_none()
            return int(count) if count is not None else 0

        return self._guard("get_login_attempt_count", 0, _get)

    def reset_login_attempt_count(self) -> bool:
        return self._guard(
            "reset_login_attempt_count", False, lambda: self._update(login_attempts=0)
        )
