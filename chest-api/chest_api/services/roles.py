"""
Role check against the Discord guild, backed by RoleCache.

- fresh cache entry (< ROLE_CACHE_TTL_SECONDS): no provider call
- otherwise ask Discord; on failure fall back to a cached entry younger than
  ROLE_CACHE_STALE_SECONDS
- no usable cache and Discord answers 404 (guild/bot misconfigured): access is
  granted temporarily and cached, as the deployment has always done
- any other failure: 403
"""
import logging

from chest_api.core.config import settings
from chest_api.core.errors import Unauthorized
from chest_api.core.security import CurrentUser
from chest_api.services.discord import DiscordClient, DiscordError
from chest_api.services.role_cache import RoleCache, RoleEntry

logger = logging.getLogger(__name__)


class RoleChecker:
    def __init__(
        self,
        cache: RoleCache,
        client: DiscordClient,
        guild_id: str = settings.DISCORD_GUILD_ID,
        required_role_id: str = settings.DISCORD_REQUIRED_ROLE_ID,
    ):
        self.cache = cache
        self.client = client
        self.guild_id = guild_id
        self.required_role_id = required_role_id

    def _fetch(self, user: CurrentUser) -> RoleEntry:
        member = self.client.get_guild_member(self.guild_id, user.id)
        roles = list(member.get("roles") or [])
        username = (member.get("user") or {}).get("username") or member.get("nick") or user.username
        return RoleEntry(
            roles=roles,
            has_required_role=self.required_role_id in roles,
            username=username,
        )

    def check(self, user: CurrentUser) -> RoleEntry:
        entry = self.cache.get(user.id)

        if entry is None or not self.cache.is_fresh(entry):
            try:
                entry = self.cache.put(user.id, self._fetch(user))
            except DiscordError as e:
                logger.warning(f"[Roles] Discord role check failed for {user.id}: {e}")
                if entry is not None and self.cache.is_usable(entry):
                    logger.warning("[Roles] Using cached roles after Discord error")
                elif e.status_code == 404:
                    logger.warning("[Roles] Discord configuration incomplete - access temporarily granted")
                    entry = self.cache.put(
                        user.id,
                        RoleEntry(roles=[], has_required_role=True, username=user.username),
                    )
                else:
                    raise Unauthorized("Discord role verification failed")

        if not entry.has_required_role:
            raise Unauthorized("Required role not found")
        return entry
