from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from chest_api.core.db import SessionLocal
from chest_api.core.errors import Unauthenticated
from chest_api.core.security import CurrentUser, decode_access_token
from chest_api.services.discord import discord_client
from chest_api.services.role_cache import role_cache
from chest_api.services.roles import RoleChecker

bearer = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> CurrentUser:
    if creds is None:
        raise Unauthenticated()
    try:
        return decode_access_token(creds.credentials)
    except JWTError:
        raise Unauthenticated("Invalid token")

def get_role_checker() -> RoleChecker:
    return RoleChecker(role_cache, discord_client)

def require_role(
    user: CurrentUser = Depends(get_current_user),
    checker: RoleChecker = Depends(get_role_checker),
) -> CurrentUser:
    """Authenticated caller holding the configured guild role."""
    entry = checker.check(user)
    return CurrentUser(id=user.id, username=entry.username or user.username, is_bot=user.is_bot)
