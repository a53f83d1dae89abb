import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ubuntumeet.auth.session import CurrentUser, clear_session_cookie, get_supabase, require_user
from ubuntumeet.baas.supabase import BaaSError, SupabaseClient
from ubuntumeet.baas.tables import load_profile, update_display_name

logger = logging.getLogger(__name__)

router = APIRouter()

DELETION_MESSAGE = "Account deletion request received. Please contact support to complete the process."


class ProfileUpdate(BaseModel):
    display_name: str


class PasswordChange(BaseModel):
    password: str


@router.get("/profile")
async def read_profile(
    current: CurrentUser = Depends(require_user),
    supabase: SupabaseClient = Depends(get_supabase),
):
    profile, db_error = await load_profile(supabase, current.access_token, current.user)
    return {"profile": profile.model_dump(mode="json"), "db_error": db_error}


@router.patch("/profile")
async def update_profile(
    payload: ProfileUpdate,
    current: CurrentUser = Depends(require_user),
    supabase: SupabaseClient = Depends(get_supabase),
):
    try:
        await update_display_name(supabase, current.access_token, current.user.id, payload.display_name)
    except BaaSError as e:
        return JSONResponse(status_code=400, content={"error": f"Error: {e.message}"})
    return {"message": "Profile updated successfully!"}


@router.post("/profile/password")
async def change_password(
    payload: PasswordChange,
    current: CurrentUser = Depends(require_user),
    supabase: SupabaseClient = Depends(get_supabase),
):
    if not payload.password:
        return JSONResponse(status_code=400, content={"error": "Error: Password is required"})
    try:
        await supabase.update_user(current.access_token, {"password": payload.password})
    except BaaSError as e:
        return JSONResponse(status_code=400, content={"error": f"Error: {e.message}"})
    return {"message": "Password changed successfully!"}


@router.delete("/profile")
async def delete_account(
    response: Response,
    current: CurrentUser = Depends(require_user),
    supabase: SupabaseClient = Depends(get_supabase),
):
    # Deleting the auth user needs the service role; support finishes the job
    try:
        await supabase.sign_out(current.access_token)
    except BaaSError as e:
        logger.warning(f"Sign-out during deletion request failed for {current.user.id}: {e.message}")
    logger.info(f"Account deletion requested by {current.user.id}")
    clear_session_cookie(response)
    return {"message": DELETION_MESSAGE}
