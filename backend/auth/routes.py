"""Authentication routes: register, login, logout, me.

Password hashing and the users table are blocking work; the async routes run
them in the threadpool and only await the identity events on the loop.
"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Response
from fastapi.concurrency import run_in_threadpool
from server.config import IS_PRODUCTION, SESSION_COOKIE, SESSION_MAX_AGE
from server.container import Planner, get_planner
from server.database import get_db
from auth.utils import hash_password, verify_password, generate_token, generate_psid, get_current_user
from auth.schemas import RegisterRequest, LoginRequest, AuthResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        path="/",
        max_age=SESSION_MAX_AGE,
    )


def _create_user(db_path: str, name: str, email: str, password: str) -> Optional[dict]:
    """Insert a new user with a fresh token. Returns None if the email is taken."""
    db = get_db(db_path)
    try:
        existing = db.execute("SELECT id FROM users WHERE email = ?", (email,)).fetchone()
        if existing:
            return None
        token = generate_token()
        psid = generate_psid()
        cursor = db.execute(
            """INSERT INTO users (psid, name, email, password_hash, auth_token)
               VALUES (?, ?, ?, ?, ?)""",
            (psid, name, email, hash_password(password), token)
        )
        db.commit()
        return {"id": cursor.lastrowid, "psid": psid, "name": name, "email": email, "auth_token": token}
    finally:
        db.close()


def _check_credentials(db_path: str, email: str, password: str) -> Optional[dict]:
    """Verify the password and rotate the session token. None on bad credentials."""
    db = get_db(db_path)
    try:
        row = db.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        if not row or not verify_password(password, row["password_hash"]):
            return None
        token = generate_token()
        db.execute("UPDATE users SET auth_token = ? WHERE id = ?", (token, row["id"]))
        db.commit()
        return {**dict(row), "auth_token": token}
    finally:
        db.close()


def _clear_token(db_path: str, user_id: int) -> None:
    db = get_db(db_path)
    try:
        db.execute("UPDATE users SET auth_token = NULL WHERE id = ?", (user_id,))
        db.commit()
    finally:
        db.close()


@router.post("/register", response_model=AuthResponse)
async def register(body: RegisterRequest, response: Response, planner: Planner = Depends(get_planner)):
    if len(body.password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")
    if not body.email or "@" not in body.email:
        raise HTTPException(status_code=400, detail="Valid email required")
    if not body.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")

    email = body.email.lower().strip()
    user = await run_in_threadpool(_create_user, planner.db_path, body.name.strip(), email, body.password)
    if user is None:
        raise HTTPException(status_code=409, detail="Email already registered")

    _set_session_cookie(response, user["auth_token"])
    logger.info(f"Registered user {user['id']} (owner {user['psid']})")
    await planner.identity.signed_in(user["psid"])

    # Token only travels in the cookie
    return AuthResponse(user=UserResponse(**{k: user[k] for k in UserResponse.model_fields}))


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, response: Response, planner: Planner = Depends(get_planner)):
    user = await run_in_threadpool(_check_credentials, planner.db_path, body.email.lower().strip(), body.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    _set_session_cookie(response, user["auth_token"])
    # Warm the task/test/syllabus views for the new owner.
    await planner.identity.signed_in(user["psid"])

    return AuthResponse(user=UserResponse(**{k: user[k] for k in UserResponse.model_fields}))


@router.post("/logout")
async def logout(
    response: Response,
    current_user: dict = Depends(get_current_user),
    planner: Planner = Depends(get_planner),
):
    await run_in_threadpool(_clear_token, planner.db_path, current_user["id"])

    await planner.identity.signed_out()
    response.delete_cookie(key=SESSION_COOKIE, httponly=True, samesite="lax", path="/")
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
def get_me(current_user: dict = Depends(get_current_user)):
    return UserResponse(**{k: current_user[k] for k in UserResponse.model_fields})
