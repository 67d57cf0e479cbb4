from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from chest_api.core.config import settings


@dataclass
class CurrentUser:
    """Caller identity carried by the bearer token (Discord user or bot)."""
    id: str
    username: str
    is_bot: bool = False


def create_access_token(subject: str, username: str, is_bot: bool = False) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": subject,
        "username": username,
        "bot": is_bot,
        "exp": expire,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str) -> CurrentUser:
    """Raises ``JWTError`` on a bad signature, expiry or missing subject."""
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Missing subject")
    return CurrentUser(
        id=str(user_id),
        username=payload.get("username") or "Unknown",
        is_bot=bool(payload.get("bot", False)),
    )
