from typing import Optional

from pydantic import BaseModel


class BotAuthIn(BaseModel):
    discordUserId: Optional[str] = None
    username: Optional[str] = None
    discriminator: Optional[str] = None
    avatar: Optional[str] = None


class UserInfo(BaseModel):
    id: str
    username: str
    isBot: bool = False


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class AuthUrlOut(BaseModel):
    authUrl: str
