import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ubuntumeet.rooms.daily import create_room_from_env, get_daily_client

router = APIRouter()


@router.post("/create-room")
async def create_room_view(client: httpx.AsyncClient = Depends(get_daily_client)):
    # Request body, if any, is ignored
    result = await create_room_from_env(client)
    return JSONResponse(status_code=result.status_code, content=result.body)
