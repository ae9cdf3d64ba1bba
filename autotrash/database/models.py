# autotrash/database/models.py
from typing import Dict, Any, Optional

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator, JSON


class Base(DeclarativeBase):
    pass


class SettingsRecordJSON(TypeDecorator):
    """
    Column type for an encoded settings record: JSONB on PostgreSQL, JSON elsewhere.
    An empty record reads back as None, same as a missing one.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value: Optional[Dict[str, Any]], dialect) -> Optional[Dict[str, Any]]:
        return dict(value) if value else None

    def process_result_value(self, value: Any, dialect) -> Optional[Dict[str, Any]]:
        return dict(value) if isinstance(value, dict) and value else None


class AutoTrashSettingsRecord(Base):
    """
    One player's auto-trash settings, stored verbatim as the encoded settings record
    (Version / Profiles / ActiveProfile / Enabled / Notify).
    """
    __tablename__ = 'auto_trash_settings'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str] = mapped_column(String, nullable=False)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    record: Mapped[Optional[Dict[str, Any]]] = mapped_column(SettingsRecordJSON, nullable=True)

    __table_args__ = (
        UniqueConstraint('guild_id', 'user_id', name='uq_auto_trash_settings_guild_user'),
    )

    def __repr__(self) -> str:
        return f"<AutoTrashSettingsRecord(guild_id='{self.guild_id}', user_id='{self.user_id}')>"
