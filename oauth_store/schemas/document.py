"""Shared base for persisted record schemas"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """Record stored as a camelCase document"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        validate_assignment=True,
    )

    @field_validator("created_at", check_fields=False)
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Normalize to UTC; naive timestamps are already UTC"""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
