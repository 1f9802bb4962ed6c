"""Key-value store interface."""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Versioned record store.

    Every applied write bumps the record's ``version``. A write with
    ``expected_version`` only applies when the stored version matches;
    ``0`` means the key must not exist yet.
    """

    async def get(self, key: str) -> dict | None:
        ...

    async def set(self, key: str, record: dict, expected_version: int | None = None) -> bool:
        ...

    async def update(self, key: str, fields: dict, expected_version: int | None = None) -> bool:
        ...

    async def remove(self, key: str) -> None:
        ...
