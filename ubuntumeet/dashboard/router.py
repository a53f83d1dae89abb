import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from ubuntumeet import config
from ubuntumeet.auth.session import CurrentUser, get_current_user, get_supabase, require_user
from ubuntumeet.baas.supabase import BaaSError, SupabaseClient
from ubuntumeet.baas.tables import fetch_recent_meetings, load_profile, record_meeting
from ubuntumeet.database.models.room_models import RoomDescriptor
from ubuntumeet.rooms.daily import create_room_from_env, get_daily_client
from ubuntumeet.rooms.join import UnresolvableRoom, meeting_path, resolve_join_link

logger = logging.getLogger(__name__)

router = APIRouter()

START_FAILED_MESSAGE = "Failed to start meeting. Please check your API keys."


class JoinRequest(BaseModel):
    link: str


@router.get("/dashboard")
async def dashboard(
    current: CurrentUser = Depends(require_user),
    supabase: SupabaseClient = Depends(get_supabase),
):
    profile, db_error = await load_profile(supabase, current.access_token, current.user)

    try:
        meetings = await fetch_recent_meetings(supabase, current.access_token, current.user.id)
    except BaaSError as e:
        logger.error(f"Meetings fetch error for {current.user.id}: {e.message}")
        meetings = []

    return {
        "profile": profile.model_dump(mode="json"),
        "greeting_name": profile.name,
        "meetings": [meeting.model_dump(mode="json") for meeting in meetings],
        "db_error": db_error,
    }


@router.post("/meetings/start")
async def start_meeting(
    current: Optional[CurrentUser] = Depends(get_current_user),
    supabase: SupabaseClient = Depends(get_supabase),
    client: httpx.AsyncClient = Depends(get_daily_client),
):
    result = await create_room_from_env(client)
    if not result.ok:
        error = result.body.get("error")
        info = result.body.get("info") or "Unknown error"
        logger.error(f"Failed to start meeting: {error}: {info}")
        return JSONResponse(status_code=502, content={"error": f"{error}: {info}", "message": START_FAILED_MESSAGE})

    try:
        room = RoomDescriptor(**result.body)
    except ValidationError:
        logger.error(f"Room response without name/url: {result.body}")
        return JSONResponse(status_code=502, content={"error": "Room response is missing name or url", "message": START_FAILED_MESSAGE})

    if current:
        try:
            await record_meeting(supabase, current.access_token, room.name, current.user.id)
        except BaaSError as e:
            # Best effort
            logger.error(f"Could not record meeting {room.name}: {e.message}")

    return {"room": result.body, "path": meeting_path(room.name, room.url)}


@router.post("/meetings/join")
async def join_meeting(payload: JoinRequest):
    try:
        target = resolve_join_link(payload.link, config.DAILY_DOMAIN)
    except UnresolvableRoom as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"room_name": target.room_name, "url": target.url, "path": target.path}
