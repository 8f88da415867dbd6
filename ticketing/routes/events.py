from fastapi import APIRouter, Depends

from ..config import Settings
from ..dependencies import get_settings
from ..models import EventInfo

router = APIRouter(prefix="/api/events", tags=["events"])


# Single configured event for now
@router.get("", response_model=EventInfo)
def get_event(settings: Settings = Depends(get_settings)):
    return EventInfo(
        id=settings.event_id,
        title=settings.event_title,
        description=settings.event_description,
    )
