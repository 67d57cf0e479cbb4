"""
Discord REST client (OAuth2 code exchange, user info, guild membership).
"""
import logging
from urllib.parse import urlencode

import requests

from chest_api.core.config import settings

logger = logging.getLogger(__name__)


class DiscordError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DiscordClient:
    def __init__(
        self,
        api_base: str = settings.DISCORD_API_BASE,
        bot_token: str = settings.DISCORD_BOT_TOKEN,
        client_id: str = settings.DISCORD_CLIENT_ID,
        client_secret: str = settings.DISCORD_CLIENT_SECRET,
        redirect_uri: str = settings.DISCORD_REDIRECT_URI,
        scopes: str = settings.DISCORD_SCOPES,
        timeout: float = settings.DISCORD_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.bot_token = bot_token
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.api_base}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise DiscordError(f"Discord API unreachable: {e}") from e

        if not resp.ok:
            raise DiscordError(f"Discord API error: {resp.status_code}", status_code=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise DiscordError("Discord API returned invalid JSON", status_code=resp.status_code) from e

    def authorize_url(self) -> str:
        query = urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scopes,
        })
        return f"{self.api_base}/oauth2/authorize?{query}"

    def exchange_code(self, code: str) -> dict:
        data = self._request(
            "POST",
            "/oauth2/token",
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        if data.get("error"):
            raise DiscordError(data.get("error_description") or "Discord authentication error")
        return data

    def get_user(self, access_token: str) -> dict:
        return self._request("GET", "/users/@me", headers={"Authorization": f"Bearer {access_token}"})

    def get_guild_member(self, guild_id: str, user_id: str) -> dict:
        return self._request(
            "GET",
            f"/guilds/{guild_id}/members/{user_id}",
            headers={"Authorization": f"Bot {self.bot_token}"},
        )


discord_client = DiscordClient()
