from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, field_serializer, field_validator

from appregistry.models.registry import RegistryEntry


class CacheRecord(BaseModel):
    """Durable snapshot of a built registry.

    ``timestamp`` is when the build completed, never when the record was read.
    On the wire it is epoch milliseconds.
    """

    data: list[tuple[str, RegistryEntry]]
    timestamp: datetime

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_epoch_millis(cls, v: object) -> object:
        if isinstance(v, int | float) and not isinstance(v, bool):
            return datetime.fromtimestamp(v / 1000, tz=UTC)
        return v

    @field_serializer("timestamp")
    def serialize_timestamp(self, v: datetime) -> int:
        return int(v.timestamp() * 1000)

    def is_fresh(self, ttl: timedelta, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return now - self.timestamp < ttl

    def to_registry(self) -> dict[str, RegistryEntry]:
        return dict(self.data)

    @classmethod
    def from_registry(
        cls, registry: dict[str, RegistryEntry], timestamp: datetime
    ) -> CacheRecord:
        return cls(data=list(registry.items()), timestamp=timestamp)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
