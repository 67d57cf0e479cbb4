import hmac
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from chest_api.core.config import settings
from chest_api.core.errors import ProviderError, Unauthenticated
from chest_api.core.security import CurrentUser, create_access_token
from chest_api.deps import get_current_user, get_db
from chest_api.schemas.auth import AuthUrlOut, BotAuthIn, TokenOut, UserInfo
from chest_api.services.activity_logger import activity_logger
from chest_api.services.discord import DiscordClient, DiscordError, discord_client
from chest_api.services.role_cache import role_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_discord_client() -> DiscordClient:
    return discord_client


def _token_out(user: CurrentUser) -> TokenOut:
    return TokenOut(
        access_token=create_access_token(user.id, user.username, is_bot=user.is_bot),
        user=UserInfo(id=user.id, username=user.username, isBot=user.is_bot),
    )


@router.get("/discord", response_model=AuthUrlOut)
def discord_login(client: DiscordClient = Depends(get_discord_client)):
    """OAuth2 authorize URL for the web front."""
    return AuthUrlOut(authUrl=client.authorize_url())


@router.get("/callback")
def discord_callback(
    request: Request,
    code: str | None = Query(None),
    db: Session = Depends(get_db),
    client: DiscordClient = Depends(get_discord_client),
):
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code")

    try:
        token_data = client.exchange_code(code)
        discord_user = client.get_user(token_data["access_token"])
    except (DiscordError, KeyError) as e:
        logger.error(f"[Auth] Discord OAuth error: {e}")
        raise ProviderError("Authentication error") from e

    user = CurrentUser(id=str(discord_user["id"]), username=discord_user.get("username") or "Unknown")
    activity_logger.user_login(
        db, user,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

    out = _token_out(user)
    if settings.FRONTEND_URL:
        fragment = urlencode({"token": out.access_token})
        return RedirectResponse(f"{settings.FRONTEND_URL.rstrip('/')}/#{fragment}")
    return out


@router.post("/bot/auth", response_model=TokenOut)
def bot_auth(
    payload: BotAuthIn,
    request: Request,
    x_bot_secret: str | None = Header(None),
    db: Session = Depends(get_db),
):
    """Token for the Discord bot acting on behalf of a guild member."""
    if settings.BOT_API_SECRET and not hmac.compare_digest(
        (x_bot_secret or "").encode(), settings.BOT_API_SECRET.encode()
    ):
        logger.warning("[Auth] Bot auth rejected: bad or missing X-Bot-Secret")
        raise Unauthenticated("Invalid bot secret")

    if not payload.discordUserId or not payload.username:
        raise HTTPException(status_code=400, detail="Missing Discord user information")

    user = CurrentUser(id=payload.discordUserId, username=payload.username, is_bot=True)
    activity_logger.user_login(
        db, user,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    logger.info(f"[Auth] Bot session issued for {payload.username} ({payload.discordUserId})")
    return _token_out(user)


@router.get("/me", response_model=UserInfo)
def me(user: CurrentUser = Depends(get_current_user)):
    return UserInfo(id=user.id, username=user.username, isBot=user.is_bot)


@router.post("/logout")
def logout(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    activity_logger.user_logout(db, user)
    role_cache.evict(user.id)
    return {"message": "Logged out"}
