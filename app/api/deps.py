from typing import Generator, Optional
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
import jwt
import logging
from ..db.session import SessionLocal
from ..models.profile import Profile
from ..services.security import decode_access_token, verify_staff_pin
from ..services.line_client import LineClient, get_line_client

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/line")


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_line() -> LineClient:
    return get_line_client()


def get_current_profile(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Profile:
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    profile_id: Optional[str] = payload.get("sub")
    if not profile_id:
        raise HTTPException(status_code=401, detail="Invalid token payload")
    profile = db.get(Profile, profile_id)
    if not profile:
        raise HTTPException(status_code=401, detail="Inactive or missing user")
    return profile


def require_staff(x_staff_pin: Optional[str] = Header(default=None)) -> None:
    if not verify_staff_pin(x_staff_pin):
        logger.warning("Staff operation rejected: invalid PIN")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid PIN")
