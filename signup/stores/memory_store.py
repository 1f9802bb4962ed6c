"""In-memory signup stores."""

from __future__ import annotations

import asyncio
import time
from typing import Any


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._records: dict[str, dict[str, Any]] = {}

    def _version_of(self, key: str) -> int:
        record = self._records.get(key)
        return int(record.get("version", 0)) if record else 0

    async def get(self, key: str) -> dict | None:
        async with self._lock:
            record = self._records.get(key)
            return dict(record) if record else None

    async def set(self, key: str, record: dict, expected_version: int | None = None) -> bool:
        async with self._lock:
            current = self._version_of(key)
            if expected_version is not None and expected_version != current:
                return False
            payload = dict(record)
            payload["version"] = current + 1
            self._records[key] = payload
            return True

    async def update(self, key: str, fields: dict, expected_version: int | None = None) -> bool:
        async with self._lock:
            record = self._records.get(key)
            if not record:
                return False
            if expected_version is not None and expected_version != int(record.get("version", 0)):
                return False
            for field, value in fields.items():
                record[field] = value
            record["version"] = int(record.get("version", 0)) + 1
            return True

    async def remove(self, key: str) -> None:
        async with self._lock:
            self._records.pop(key, None)


class MemoryUserStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users_by_email: dict[str, dict[str, Any]] = {}
        self._next_id = 1

    async def get_by_email(self, email: str) -> dict | None:
        async with self._lock:
            user = self._users_by_email.get(email.lower())
            return dict(user) if user else None

    async def create_user(self, data: dict) -> dict:
        async with self._lock:
            email = data["email"].lower()
            if email in self._users_by_email:
                raise ValueError("User already exists")
            payload = dict(data)
            payload["id"] = self._next_id
            self._next_id += 1
            payload["email"] = email
            payload["created_at"] = payload.get("created_at", int(time.time()))
            payload["updated_at"] = payload.get("updated_at", payload["created_at"])
            self._users_by_email[email] = payload
            return dict(payload)


class MemoryRateLimiter:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._hits: dict[str, list[float]] = {}

    async def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        now = time.time()
        async with self._lock:
            hits = self._hits.get(key, [])
            hits = [timestamp for timestamp in hits if (now - timestamp) < window_seconds]
            if len(hits) >= limit:
                self._hits[key] = hits
                return False
            hits.append(now)
            self._hits[key] = hits
            return True
