from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...schemas.profile import ProfileOut
from ...models.profile import Profile
from ...services.profile_service import get_visible_profile
from ..deps import get_db, get_current_profile

router = APIRouter()


@router.get("/{profile_id}", response_model=ProfileOut)
def get_one(profile_id: str, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    return get_visible_profile(db, current, profile_id)
