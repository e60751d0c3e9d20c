from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging
from ...schemas.auth import LineLoginIn, TokenOut
from ...schemas.profile import ProfileOut
from ...services.line_client import LineClient, InvalidLineToken
from ...services.profile_service import upsert_line_profile
from ...services.security import create_access_token
from ..deps import get_db, get_line

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/line", response_model=TokenOut)
def login_with_line(payload: LineLoginIn, db: Session = Depends(get_db), line: LineClient = Depends(get_line)):
    try:
        identity = line.verify_id_token(payload.id_token)
    except InvalidLineToken as e:
        logger.warning(f"LINE login rejected: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid LINE token")

    is_friend = line.get_friendship(payload.access_token) if payload.access_token else None
    profile = upsert_line_profile(db, identity=identity, is_friend=is_friend)
    logger.info(f"LINE login: user={profile.id}, friend={profile.is_line_friend}")
    return TokenOut(access_token=create_access_token(profile.id), profile=ProfileOut.model_validate(profile))
