from __future__ import annotations

from typing import Any

import bcrypt

_accounts: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def register_account(username: str, password: str, user_id: int, role: str = "user") -> None:
    """Create or replace a login bound to a store user id."""
    _accounts[username] = {
        "password_hash": _hash_password(password),
        "user_id": user_id,
        "role": role,
    }


def _seed_accounts() -> None:
    """Pre-seed demo logins for the users in the seed data."""
    register_account("alice", "alice123", user_id=1)
    register_account("bob", "bob123", user_id=2)
    register_account("erin", "erin123", user_id=5)
    register_account("admin", "admin123", user_id=6, role="admin")


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{id, username, role}`` or ``None``."""
    record = _accounts.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"id": record["user_id"], "username": username, "role": record["role"]}
    return None


_seed_accounts()
