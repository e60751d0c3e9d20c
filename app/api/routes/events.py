from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...schemas.event import EventIn, EventOut
from ...models.profile import Profile
from ...services.analytics_service import record_client_event
from ..deps import get_db, get_current_profile

router = APIRouter()


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def record(payload: EventIn, db: Session = Depends(get_db), current: Profile = Depends(get_current_profile)):
    event = record_client_event(
        db,
        user_id=current.id,
        event_name=payload.event_name,
        source=payload.source,
        metadata=payload.metadata,
    )
    if event is None:
        raise HTTPException(500, "Failed to record event")
    return event
