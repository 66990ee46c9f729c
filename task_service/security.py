from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from task_service import config
from task_service.errors import InvalidInput, Unauthorized

# ---------------------------------------------------------
# Password Hashing
# ---------------------------------------------------------
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.BCRYPT_ROUNDS,
)
MAX_BCRYPT_BYTES = 72  # bcrypt limit


def hash_password(password: str) -> str:
    """Hash password safely & check 72-byte bcrypt rule."""
    if len(password.encode("utf-8")) > MAX_BCRYPT_BYTES:
        raise InvalidInput(f"Password too long. Max {MAX_BCRYPT_BYTES} bytes allowed.")
    return pwd_context.hash(password)


def verify_password(raw: str, hashed: str) -> bool:
    """Verify password with bcrypt."""
    b = raw.encode("utf-8")
    if len(b) > MAX_BCRYPT_BYTES:
        # could never have been stored; don't hand bcrypt an oversized secret
        return False
    return pwd_context.verify(raw, hashed)


# ---------------------------------------------------------
# JWT
# ---------------------------------------------------------
def create_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + (expires_delta or timedelta(days=config.JWT_EXP_DAYS)),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> str:
    """Return the user id encoded in a valid, unexpired token."""
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized("Not authorized, token failed")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Not authorized, token failed")
    return user_id
