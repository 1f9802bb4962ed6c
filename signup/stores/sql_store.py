"""SQL signup stores using SQLAlchemy."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from db.engine import SessionLocal
from db.models.pending import PendingSignupRow
from db.models.user import User


def _user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "hashed_password": user.hashed_password,
        "account_status": user.account_status,
        "created_at": int(user.created_at.timestamp()) if user.created_at else None,
        "updated_at": int(user.updated_at.timestamp()) if user.updated_at else None,
    }


class SQLKeyValueStore:
    """Pending signup records backed by a relational table."""

    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()

    async def get(self, key: str) -> dict | None:
        with self._get_session() as db:
            row = db.get(PendingSignupRow, key)
            if not row:
                return None
            record = dict(row.payload)
            record["version"] = row.version
            return record

    async def set(self, key: str, record: dict, expected_version: int | None = None) -> bool:
        payload = {field: value for field, value in record.items() if field != "version"}
        with self._get_session() as db:
            if expected_version == 0:
                db.add(PendingSignupRow(key=key, payload=payload, version=1))
                try:
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    return False
                return True

            if expected_version is None:
                row = db.execute(
                    select(PendingSignupRow).where(PendingSignupRow.key == key).with_for_update()
                ).scalar_one_or_none()
                if row:
                    row.payload = payload
                    row.version = row.version + 1
                else:
                    db.add(PendingSignupRow(key=key, payload=payload, version=1))
                db.commit()
                return True

            result = db.execute(
                update(PendingSignupRow)
                .where(PendingSignupRow.key == key, PendingSignupRow.version == expected_version)
                .values(payload=payload, version=expected_version + 1)
            )
            db.commit()
            return result.rowcount == 1

    async def update(self, key: str, fields: dict, expected_version: int | None = None) -> bool:
        with self._get_session() as db:
            row = db.execute(
                select(PendingSignupRow).where(PendingSignupRow.key == key).with_for_update()
            ).scalar_one_or_none()
            if not row:
                return False
            current_version = row.version
            if expected_version is not None and expected_version != current_version:
                return False
            payload = dict(row.payload)
            payload.update({field: value for field, value in fields.items() if field != "version"})
            result = db.execute(
                update(PendingSignupRow)
                .where(PendingSignupRow.key == key, PendingSignupRow.version == current_version)
                .values(payload=payload, version=current_version + 1)
            )
            db.commit()
            return result.rowcount == 1

    async def remove(self, key: str) -> None:
        with self._get_session() as db:
            db.execute(delete(PendingSignupRow).where(PendingSignupRow.key == key))
            db.commit()


class SQLUserStore:
    """Verified user accounts backed by a relational table."""

    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def _get_session(self) -> Session:
        return self._session_factory()

    async def get_by_email(self, email: str) -> dict | None:
        with self._get_session() as db:
            user = db.execute(
                select(User).where(User.email == email.lower())
            ).scalar_one_or_none()
            if not user:
                return None
            return _user_to_dict(user)

    async def create_user(self, data: dict) -> dict:
        with self._get_session() as db:
            user = User(
                email=data["email"].lower(),
                name=data.get("name"),
                hashed_password=data.get("hashed_password"),
                account_status=data.get("account_status", "active"),
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise ValueError("User already exists") from exc
            db.refresh(user)
            return _user_to_dict(user)
