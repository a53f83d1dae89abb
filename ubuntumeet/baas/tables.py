import logging
from typing import List, Optional, Tuple

from ubuntumeet.baas.supabase import BaaSError, SupabaseClient
from ubuntumeet.database.models.profile_models import AuthUser, Meeting, Profile

logger = logging.getLogger(__name__)

PROFILES = "profiles"
MEETINGS = "meetings"
RECENT_MEETINGS_LIMIT = 5


async def fetch_profile(client: SupabaseClient, access_token: str, user_id: str) -> Optional[Profile]:
    rows = await client.select(PROFILES, access_token, filters={"id": user_id}, limit=1)
    return Profile(**rows[0]) if rows else None


async def update_display_name(client: SupabaseClient, access_token: str, user_id: str, display_name: str):
    await client.update(PROFILES, access_token, {"display_name": display_name}, filters={"id": user_id})


async def fetch_recent_meetings(
    client: SupabaseClient, access_token: str, host_id: str, limit: int = RECENT_MEETINGS_LIMIT
) -> List[Meeting]:
    rows = await client.select(
        MEETINGS,
        access_token,
        filters={"host_id": host_id},
        order="started_at",
        descending=True,
        limit=limit,
    )
    return [Meeting(**row) for row in rows]


async def record_meeting(client: SupabaseClient, access_token: str, room_name: str, host_id: str):
    # started_at and participant_count are filled in by the table defaults
    await client.insert(MEETINGS, access_token, {"room_name": room_name, "host_id": host_id})
    logger.info(f"Recorded meeting {room_name} for host {host_id}")


async def load_profile(client: SupabaseClient, access_token: str, user: AuthUser) -> Tuple[Profile, bool]:
    """Stored profile, or the fallback profile plus whether the read failed."""
    try:
        profile = await fetch_profile(client, access_token, user.id)
    except BaaSError as e:
        logger.error(f"Profile fetch error for {user.id}: {e.message}")
        return Profile.fallback_for(user), True
    return profile or Profile.fallback_for(user), False
