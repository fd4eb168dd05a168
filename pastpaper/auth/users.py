from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import bcrypt

from ..config import DEFAULT_APP_CONFIG
from .profiles import create_profile

_users: dict[str, dict[str, Any]] = {}
_admin_emails: set[str] = set(DEFAULT_APP_CONFIG.admin_emails)


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _role_for(email: str) -> str:
    return "admin" if email in _admin_emails else "user"


def _public(email: str, record: dict[str, Any]) -> dict[str, Any]:
    return {"user_id": record["user_id"], "email": email, "role": _role_for(email)}


def create_user(email: str, password: str) -> dict[str, Any] | None:
    """Register a new account with a free profile. Returns ``None`` if the email is taken."""
    key = email.strip().lower()
    if key in _users:
        return None
    record = {
        "user_id": uuid.uuid4().hex,
        "password_hash": _hash_password(password),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    _users[key] = record
    create_profile(record["user_id"])
    return _public(key, record)


def authenticate(email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{user_id, email, role}`` or ``None``."""
    key = email.strip().lower()
    record = _users.get(key)
    if record and _verify_password(password, record["password_hash"]):
        return _public(key, record)
    return None


def list_users() -> list[dict[str, Any]]:
    return [
        {**_public(email, record), "created_at": record["created_at"]}
        for email, record in _users.items()
    ]


def get_admin_emails() -> list[str]:
    return sorted(_admin_emails)


def add_admin_email(email: str) -> None:
    _admin_emails.add(email.strip().lower())


def reset_admin_emails() -> None:
    _admin_emails.clear()
    _admin_emails.update(DEFAULT_APP_CONFIG.admin_emails)


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    create_user("student@example.com", "student123")
    create_user("admin@example.com", "admin123")


_seed_users()
