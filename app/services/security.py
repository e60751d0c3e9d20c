import hmac
from datetime import datetime, timedelta, timezone
import jwt
from ..core.config import settings


def create_access_token(sub: str, minutes: int | None = None) -> str:
    exp_min = minutes if minutes is not None else settings.ACCESS_TOKEN_MIN
    expire = datetime.now(timezone.utc) + timedelta(minutes=exp_min)
    payload = {"sub": sub, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def decode_access_token(token: str) -> dict:
    # raises jwt.PyJWTError on bad signature or expiry
    return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])


def verify_staff_pin(pin: str | None) -> bool:
    if not pin or not settings.STAFF_PIN:
        return False
    return hmac.compare_digest(pin.encode("utf-8"), settings.STAFF_PIN.encode("utf-8"))
