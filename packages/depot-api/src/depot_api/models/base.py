# SPDX-License-Identifier: MIT
"""Shared configuration for protocol models."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ProtocolModel(BaseModel):
    """Base model serialized with the camelCase names clients expect."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from the database."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
