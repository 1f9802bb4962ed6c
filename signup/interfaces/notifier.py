"""Notifier interface."""

from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    async def send_code(self, name: str, email: str, code: str) -> bool:
        ...
