import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ubuntumeet import config
from ubuntumeet.baas.supabase import SupabaseClient

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


def log_auth_event(event, session):
    user_id = session.user.id if session else None
    logger.info(f"🔐 Auth state change: {event} user={user_id}")


# --- Lifespan ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    supabase = SupabaseClient(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
    subscription = supabase.on_auth_state_change(log_auth_event)
    app.state.supabase = supabase
    try:
        yield
    finally:
        subscription.unsubscribe()
        await supabase.aclose()


# --- App Initialization ---
app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
from ubuntumeet.auth.router import router as auth_router
from ubuntumeet.dashboard.router import router as dashboard_router
from ubuntumeet.profile.router import router as profile_router
from ubuntumeet.rooms.router import router as rooms_router
from ubuntumeet.shell.pages import router as pages_router

app.include_router(rooms_router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(dashboard_router, prefix="/api")
app.include_router(profile_router, prefix="/api")
app.include_router(pages_router)


@app.get("/health")
def health():
    return {"msg": "Backend running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("ubuntumeet.main:app", host="0.0.0.0", port=config.PORT)
