from __future__ import annotations

from typing import Any, Dict, Optional

from cleaning_checklist.errors import DuplicateEmailError

from .security import verify_password


def public_user(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    return {"id": int(d["id"]), "email": d["email"]}


def get_user_by_email(conn: Any, email: str) -> Optional[Any]:
    if not email:
        return None
    return conn.execute(
        "SELECT id, email, password FROM users WHERE email=?",
        (email,),
    ).fetchone()


def get_user_by_id(conn: Any, user_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT id, email FROM users WHERE id=?",
        (int(user_id),),
    ).fetchone()
    if row is None:
        return None
    return public_user(row)


def verify_user_credentials(conn: Any, email: str, password: str) -> Optional[Any]:
    row = get_user_by_email(conn, email)
    if row is None:
        return None
    if not verify_password(password, str(row["password"])):
        return None
    return row


def create_user(conn: Any, *, email: str, password_hash: str) -> int:
    """Insert a user row and return its id.

    The UNIQUE constraint on `users.email` is the final guard; the pre-check
    just gives the common case a typed error.
    """
    existing = conn.execute("SELECT 1 FROM users WHERE email=?", (email,)).fetchone()
    if existing is not None:
        raise DuplicateEmailError("Error registering user")

    rows = conn.execute(
        "INSERT INTO users (email, password) VALUES (?, ?) RETURNING id",
        (email, password_hash),
    ).fetchall()
    return int(rows[0]["id"])
