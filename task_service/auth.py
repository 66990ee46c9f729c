import uuid
import logging
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy import select

from task_service import config
from task_service.database import database
from task_service.errors import Conflict, Forbidden, Unauthorized
from task_service.models import users, Role
from task_service.schemas import UserProfile
from task_service.security import hash_password, verify_password, create_token, decode_token

logger = logging.getLogger("task-service")

INVALID_CREDENTIALS = "Invalid email or password"


def issue_token(user_id: str) -> str:
    return create_token(user_id)


def _auth_payload(user_id: str, email: str, role: str) -> dict:
    return {"id": user_id, "email": email, "role": role, "token": issue_token(user_id)}


async def register(email: str, password: str, role: Role = Role.standard_user) -> dict:
    email = email.strip().lower()
    role = Role(role)

    if role == Role.admin and not config.ALLOW_ADMIN_SIGNUP:
        logger.warning(f"[Auth] Rejected admin self-registration for {email}")
        raise Forbidden("Admin role cannot be self-assigned")

    existing = await database.fetch_one(users.select().where(users.c.email == email))
    if existing:
        raise Conflict("User already exists")

    user_id = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    password_hash = hash_password(password)
    try:
        await database.execute(
            users.insert().values(
                id=user_id,
                email=email,
                password_hash=password_hash,
                role=role.value,
                created_at=now,
                updated_at=now,
            )
        )
    except Exception:
        # a concurrent signup took the email between the check and the insert;
        # the unique index rejects it with a driver-specific error
        if await database.fetch_one(users.select().where(users.c.email == email)):
            logger.warning(f"[Auth] Concurrent signup lost the race for {email}")
            raise Conflict("User already exists")
        raise
    logger.info(f"[Auth] Created new user: {email} ({role.value})")
    return _auth_payload(user_id, email, role.value)


async def login(email: str, password: str) -> dict:
    email = email.strip().lower()
    user = await database.fetch_one(users.select().where(users.c.email == email))
    # same message for unknown email and bad password
    if not user or not verify_password(password, user["password_hash"]):
        raise Unauthorized(INVALID_CREDENTIALS)

    logger.info(f"[Auth] User logged in: {email} ({user['role']})")
    return _auth_payload(user["id"], user["email"], user["role"])


def _bearer_token(request: Request) -> str:
    auth = request.headers.get("Authorization")
    if not auth or not auth.lower().startswith("bearer "):
        raise Unauthorized("Not authorized, no token")

    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise Unauthorized("Not authorized, no token")
    return token


async def authenticate(request: Request) -> UserProfile:
    """
    FastAPI dependency guarding every protected route.

    Resolves the bearer token to a stored user and attaches the public
    profile (never the password hash) to ``request.state.user``.
    """
    user_id = decode_token(_bearer_token(request))

    row = await database.fetch_one(
        select(users.c.id, users.c.email, users.c.role).where(users.c.id == user_id)
    )
    if not row:
        raise Unauthorized("Not authorized, user not found")

    user = UserProfile(id=row["id"], email=row["email"], role=row["role"])
    request.state.user = user
    return user
