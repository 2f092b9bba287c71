"""Authentication utilities: password hashing + token management + owner key."""

import hashlib
import secrets
import uuid
from typing import Optional
from fastapi import Depends, HTTPException, Request
from server.config import SESSION_COOKIE
from server.container import Planner, get_planner
from server.database import get_db


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    h = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), 100_000)
    return f"{salt}${h.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    if "$" not in stored_hash:
        return False
    salt, h = stored_hash.split("$", 1)
    new_h = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), 100_000)
    return secrets.compare_digest(new_h.hex(), h)


def generate_token() -> str:
    return secrets.token_urlsafe(48)


def generate_psid() -> str:
    """Stable per-user owner key stamped on every document the user owns."""
    return uuid.uuid4().hex


def lookup_user(db_path: str, session_token: Optional[str]) -> Optional[dict]:
    if not session_token:
        return None
    db = get_db(db_path)
    user = db.execute(
        "SELECT * FROM users WHERE auth_token = ?", (session_token,)
    ).fetchone()
    db.close()
    return dict(user) if user else None


def get_current_user(request: Request, planner: Planner = Depends(get_planner)):
    """FastAPI dependency: extract and validate auth token from cookie."""
    session_token = request.cookies.get(SESSION_COOKIE)
    if not session_token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = lookup_user(planner.db_path, session_token)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def get_owner_key(current_user: dict = Depends(get_current_user)) -> str:
    return current_user["psid"]
