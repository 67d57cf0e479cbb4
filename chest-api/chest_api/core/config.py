from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str
    CREATE_TABLES: bool = False
    ENABLE_SCHEDULER: bool = True
    ROOT_PATH: str = ""

    JWT_SECRET: str = "CHANGE_ME"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60

    # Discord OAuth2 + bot
    DISCORD_API_BASE: str = "https://discord.com/api"
    DISCORD_CLIENT_ID: str = ""
    DISCORD_CLIENT_SECRET: str = ""
    DISCORD_REDIRECT_URI: str = "http://localhost:4000/auth/callback"
    DISCORD_GUILD_ID: str = ""
    DISCORD_BOT_TOKEN: str = ""
    # Shared secret the bot sends as X-Bot-Secret; empty leaves /auth/bot/auth open
    BOT_API_SECRET: str = ""
    DISCORD_REQUIRED_ROLE_ID: str = ""
    DISCORD_SCOPES: str = "identify guilds guilds.members.read"
    DISCORD_TIMEOUT_SECONDS: float = 5.0
    FRONTEND_URL: str = ""

    # Role cache (seconds)
    ROLE_CACHE_TTL_SECONDS: int = 60 * 60
    ROLE_CACHE_STALE_SECONDS: int = 24 * 60 * 60
    ROLE_CACHE_EVICT_MINUTES: int = 15

    ITEMS_IMPORT_PATH: str = "dune_awakening_items_fr.json"

settings = Settings()
