from pydantic import BaseModel
from .profile import ProfileOut


class LineLoginIn(BaseModel):
    id_token: str
    # LIFF access token, only used to refresh the friend flag
    access_token: str | None = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: ProfileOut
