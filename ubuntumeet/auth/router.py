import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from ubuntumeet.auth.session import (
    CurrentUser,
    SessionData,
    clear_session_cookie,
    get_current_session,
    get_supabase,
    require_user,
    set_session_cookie,
)
from ubuntumeet.baas.supabase import BaaSError, SupabaseClient
from ubuntumeet.database.models.profile_models import AuthUser

logger = logging.getLogger(__name__)

router = APIRouter()


class SignUpRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None


class SignInRequest(BaseModel):
    email: str
    password: str


@router.post("/auth/signup")
async def sign_up(payload: SignUpRequest, response: Response, supabase: SupabaseClient = Depends(get_supabase)):
    try:
        user, session = await supabase.sign_up(payload.email, payload.password, payload.full_name)
    except BaaSError as e:
        raise HTTPException(status_code=400, detail=e.message)

    if session:
        set_session_cookie(response, session)
    return {
        "user": user.model_dump(),
        "session_issued": session is not None,
        "message": "Account created!" if session else "Check your e-mail to confirm your account.",
    }


@router.post("/auth/signin")
async def sign_in(payload: SignInRequest, response: Response, supabase: SupabaseClient = Depends(get_supabase)):
    try:
        session = await supabase.sign_in_with_password(payload.email, payload.password)
    except BaaSError as e:
        logger.info(f"Sign-in rejected for {payload.email}: {e.message}")
        raise HTTPException(status_code=401, detail=e.message)

    set_session_cookie(response, session)
    return {"message": "Signed in", "user": session.user.model_dump()}


@router.post("/auth/logout")
async def logout(
    response: Response,
    session: Optional[SessionData] = Depends(get_current_session),
    supabase: SupabaseClient = Depends(get_supabase),
):
    if session:
        try:
            await supabase.sign_out(session.access_token)
        except BaaSError as e:
            logger.warning(f"Supabase sign-out failed for {session.user_id}: {e.message}")
    clear_session_cookie(response)
    return {"message": "Successfully logged out"}


@router.get("/users/me", response_model=AuthUser)
async def read_users_me(current: CurrentUser = Depends(require_user)):
    return current.user
