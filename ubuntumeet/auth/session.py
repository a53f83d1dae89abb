import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response
from jose import JWTError, jwt
from pydantic import BaseModel

from ubuntumeet import config
from ubuntumeet.baas.supabase import AuthSession, BaaSError, SupabaseClient
from ubuntumeet.database.models.profile_models import AuthUser

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"


class SessionData(BaseModel):
    user_id: str
    email: Optional[str] = None
    access_token: str
    refresh_token: Optional[str] = None


class CurrentUser(BaseModel):
    user: AuthUser
    session: SessionData

    @property
    def access_token(self) -> str:
        return self.session.access_token


# --- JWT Helpers ---
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def session_token_for(session: AuthSession) -> str:
    return create_access_token(data={
        "sub": session.user.id,
        "email": session.user.email,
        "sb_access_token": session.access_token,
        "sb_refresh_token": session.refresh_token,
    })


def set_session_cookie(response: Response, session: AuthSession):
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_token_for(session),
        httponly=True,
        samesite="lax",
        secure=config.COOKIE_SECURED,
        max_age=config.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        expires=datetime.now(timezone.utc) + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(SESSION_COOKIE, httponly=True, samesite="lax", secure=config.COOKIE_SECURED)


def get_supabase(request: Request) -> SupabaseClient:
    return request.app.state.supabase


async def get_current_session(request: Request) -> Optional[SessionData]:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        return None
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub") or not payload.get("sb_access_token"):
        return None
    return SessionData(
        user_id=payload["sub"],
        email=payload.get("email"),
        access_token=payload["sb_access_token"],
        refresh_token=payload.get("sb_refresh_token"),
    )


async def get_current_user(
    response: Response,
    session: Optional[SessionData] = Depends(get_current_session),
    supabase: SupabaseClient = Depends(get_supabase),
) -> Optional[CurrentUser]:
    if not session:
        return None
    try:
        user = await supabase.get_user(session.access_token)
        return CurrentUser(user=user, session=session)
    except BaaSError as e:
        if e.status_code not in (401, 403) or not session.refresh_token:
            logger.warning(f"Could not load user {session.user_id}: {e.message}")
            return None

    # Supabase access tokens are short-lived; swap the refresh token for a new pair
    try:
        refreshed = await supabase.refresh_session(session.refresh_token)
    except BaaSError as e:
        logger.warning(f"Session refresh failed for {session.user_id}: {e.message}")
        return None
    set_session_cookie(response, refreshed)
    return CurrentUser(
        user=refreshed.user,
        session=SessionData(
            user_id=refreshed.user.id,
            email=refreshed.user.email,
            access_token=refreshed.access_token,
            refresh_token=refreshed.refresh_token,
        ),
    )


async def require_user(current: Optional[CurrentUser] = Depends(get_current_user)) -> CurrentUser:
    if not current:
        raise HTTPException(status_code=401, detail="Token expired or not authenticated. Please log in again.")
    return current
