from fastapi import APIRouter, Depends, status

from restopos.api.deps import Actor, bus_for, get_actor
from restopos.events.notification_log import NotificationLog
from restopos.schemas.notification import NotificationListResponse
from restopos.schemas.response import SuccessResponse

router = APIRouter()


@router.get("/", response_model=SuccessResponse)
async def list_notifications_endpoint():
    """Current contents of the shared notification log, newest first."""
    entries = await NotificationLog().read_all()
    return SuccessResponse(data=NotificationListResponse(notifications=entries).model_dump(mode="json"))


@router.delete("/", status_code=status.HTTP_200_OK, response_model=SuccessResponse)
async def clear_notifications_endpoint(actor: Actor = Depends(get_actor)):
    await bus_for(actor).clear()
    return SuccessResponse(data={"cleared": True})
