import logging
from typing import Optional, Dict, Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .models import AutoTrashSettingsRecord

logger = logging.getLogger(__name__)


async def get_settings_row(db: AsyncSession, guild_id: str, user_id: str) -> AutoTrashSettingsRecord | None:
    """
    Retrieves the auto-trash settings row for a specific user in a specific guild.
    """
    result = await db.execute(
        select(AutoTrashSettingsRecord)
        .where(AutoTrashSettingsRecord.guild_id == guild_id)
        .where(AutoTrashSettingsRecord.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_settings_record(db: AsyncSession, guild_id: str, user_id: str) -> Optional[Dict[str, Any]]:
    """
    Returns the stored settings record, or None when the user has never been seen.
    """
    row = await get_settings_row(db, guild_id, user_id)
    if row is None:
        return None
    return dict(row.record) if row.record else None


async def save_settings_record(
    db: AsyncSession,
    guild_id: str,
    user_id: str,
    record: Dict[str, Any]
) -> AutoTrashSettingsRecord:
    """
    Creates the settings row if it doesn't exist, or replaces its record if it does.
    The record is stored exactly as given.
    """
    row = await get_settings_row(db, guild_id, user_id)

    if row:
        row.record = dict(record)
    else:
        row = AutoTrashSettingsRecord(guild_id=guild_id, user_id=user_id, record=dict(record))
        db.add(row)

    try:
        await db.commit()
        await db.refresh(row)
        return row
    except IntegrityError:
        await db.rollback()
        logger.error(f"IntegrityError saving auto-trash settings for user {user_id} in guild {guild_id}.", exc_info=True)
        raise


async def delete_settings_record(db: AsyncSession, guild_id: str, user_id: str) -> bool:
    """
    Deletes auto-trash settings for a specific user in a specific guild.
    Returns True if settings were deleted, False otherwise.
    """
    row = await get_settings_row(db, guild_id, user_id)
    if row is None:
        return False

    await db.delete(row)
    await db.commit()
    return True
