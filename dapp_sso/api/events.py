from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from dapp_sso.sso.events import EventType
from dapp_sso.sso.service import SSOService, get_sso_service

router = APIRouter()


@router.get("/events")
async def recent_events(
    event_type: Optional[EventType] = Query(default=None, description="Only this notification type"),
    limit: int = Query(default=50, ge=1, le=500),
    service: SSOService = Depends(get_sso_service),
) -> List[Dict[str, Any]]:
    """Recent session and registry notifications, newest first."""
    return [
        event.model_dump(mode="json")
        for event in service.events.recent(limit=limit, event_type=event_type)
    ]
