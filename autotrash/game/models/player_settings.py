# autotrash/game/models/player_settings.py
from __future__ import annotations
from enum import Enum
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from autotrash.game.exceptions import InvalidSettingsRecordError
from autotrash.game.models.trash_profile import TrashProfile

MAX_PROFILES = 50
DEFAULT_PROFILE_NAME = "Default"
LATEST_SCHEMA_VERSION = 1


class ProfileActionResult(str, Enum):
    """Outcome codes returned by profile mutations. Callers map these to localized text."""
    CREATED = "created"
    DUPLICATED = "duplicated"
    RENAMED = "renamed"
    DELETED = "deleted"
    ACTIVATED = "activated"
    NAME_EMPTY = "name_empty"
    NAME_TAKEN = "name_taken"
    LIMIT_REACHED = "limit_reached"
    NOT_FOUND = "not_found"
    LAST_PROFILE = "last_profile"

    @property
    def is_success(self) -> bool:
        return self in (
            ProfileActionResult.CREATED,
            ProfileActionResult.DUPLICATED,
            ProfileActionResult.RENAMED,
            ProfileActionResult.DELETED,
            ProfileActionResult.ACTIVATED,
        )


class AutoTrashPlayerSettings(BaseModel):
    """
    Per-player auto-trash settings record.

    Field aliases are the persisted field names (Version, Profiles, ActiveProfile, Enabled,
    Notify, and the legacy ExactItems list) and must not change. The record is only ever
    mutated through ProfileManager, which also runs migrations and repairs invariants.
    """
    model_config = ConfigDict(populate_by_name=True, validate_assignment=False)

    schema_version: int = Field(default=0, alias="Version")
    profiles: Dict[str, TrashProfile] = Field(default_factory=dict, alias="Profiles")
    active_profile: Optional[str] = Field(default=None, alias="ActiveProfile")
    enabled: bool = Field(default=True, alias="Enabled")
    notify: bool = Field(default=True, alias="Notify")
    # Only read from v0 records; consumed by the 0 -> 1 migration and never written back.
    legacy_exact_items: List[str] = Field(default_factory=list, alias="ExactItems")

    @field_validator('profiles', mode='before')
    @classmethod
    def _tolerate_missing_profiles(cls, v: Any) -> Dict[str, Any]:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(name): (profile if profile is not None else {}) for name, profile in v.items()}
        return v

    @field_validator('legacy_exact_items', mode='before')
    @classmethod
    def _tolerate_missing_legacy(cls, v: Any) -> List[str]:
        if v is None:
            return []
        return v

    @field_validator('schema_version', mode='before')
    @classmethod
    def _tolerate_missing_version(cls, v: Any) -> int:
        if v is None:
            return 0
        return v

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> "AutoTrashPlayerSettings":
        if record is None:
            return cls()
        if not isinstance(record, dict):
            raise InvalidSettingsRecordError(f"Settings record must be a mapping, got {type(record).__name__}.")
        try:
            return cls.model_validate(record)
        except ValidationError as e:
            raise InvalidSettingsRecordError(f"Invalid auto-trash settings record: {e}") from e

    def to_record(self) -> Dict[str, Any]:
        return {
            "Version": self.schema_version,
            "Profiles": {name: profile.to_record() for name, profile in self.profiles.items()},
            "ActiveProfile": self.active_profile,
            "Enabled": self.enabled,
            "Notify": self.notify,
        }

    def copy_settings(self) -> "AutoTrashPlayerSettings":
        return AutoTrashPlayerSettings(
            schema_version=self.schema_version,
            profiles={name: profile.copy_profile() for name, profile in self.profiles.items()},
            active_profile=self.active_profile,
            enabled=self.enabled,
            notify=self.notify,
            legacy_exact_items=list(self.legacy_exact_items),
        )
