import json
import logging
import os
import time
from typing import Any, AsyncIterator, Optional

import httpx
from pydantic import BaseModel

from ubuntumeet import config
from ubuntumeet.database.models.room_models import RoomProperties, RoomRequest

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "invalid-request-error"
DEFAULT_ERROR_INFO = "Check your Daily.co API key and room properties."


class ProxyConfigError(ValueError):
    pass


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ProxyConfigError(f"{name} must be an integer") from None


class RoomProxyConfig(BaseModel):
    api_key_env: str = "DAILY_API_KEY"
    api_key: Optional[str] = None
    api_url: str = "https://api.daily.co/v1"
    expiry_seconds: int = 3600
    privacy: str = "public"
    enable_screenshare: bool = True
    enable_recording: str = "local"
    enable_chat: bool = True

    @classmethod
    def from_env(cls) -> "RoomProxyConfig":
        key_env = os.getenv("DAILY_API_KEY_ENV", config.DAILY_API_KEY_ENV)
        return cls(
            api_key_env=key_env,
            api_key=os.getenv(key_env) or None,
            api_url=os.getenv("DAILY_API_URL", config.DAILY_API_URL),
            expiry_seconds=_env_int("ROOM_EXPIRY_SECONDS", 3600),
            privacy=os.getenv("ROOM_PRIVACY", "public"),
            enable_screenshare=config.env_flag("ROOM_ENABLE_SCREENSHARE", True),
            enable_recording=os.getenv("ROOM_ENABLE_RECORDING", "local"),
            enable_chat=config.env_flag("ROOM_ENABLE_CHAT", True),
        )

    @property
    def rooms_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/rooms"

    def build_request(self, now: Optional[float] = None) -> RoomRequest:
        now = time.time() if now is None else now
        return RoomRequest(
            privacy=self.privacy,
            properties=RoomProperties(
                exp=int(now) + self.expiry_seconds,
                enable_screenshare=self.enable_screenshare,
                enable_recording=self.enable_recording,
                enable_chat=self.enable_chat,
            ),
        )


class ProxyResult(BaseModel):
    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return self.status_code == 200


async def get_daily_client() -> AsyncIterator[httpx.AsyncClient]:
    # No timeout: a hung provider holds the request until the socket gives up
    async with httpx.AsyncClient(timeout=None) as client:
        yield client


def _failure(error: Any, info: Any = None) -> ProxyResult:
    body = {"error": error}
    if info is not None:
        body["info"] = info
    return ProxyResult(status_code=500, body=body)


async def create_room(proxy_config: RoomProxyConfig, client: httpx.AsyncClient) -> ProxyResult:
    """Forward a room-creation request to Daily.co with the server-held key.

    Single best-effort call: no retries, no idempotency key. Every failure
    comes back as a 500 result with an ``error`` and, where there is one,
    an ``info`` diagnostic.
    """
    if not proxy_config.api_key:
        logger.error(f"{proxy_config.api_key_env} is not set")
        return _failure(f"{proxy_config.api_key_env} is not set")

    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {proxy_config.api_key}",
    }
    payload = proxy_config.build_request().model_dump()

    try:
        response = await client.post(proxy_config.rooms_url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Error creating room: {e!r}")
        return _failure("Failed to create room", str(e))

    response_text = response.text
    try:
        room = json.loads(response_text)
    except ValueError:
        logger.error(f"Failed to parse Daily API response: {response_text}")
        return _failure("Invalid response from Daily API", response_text)

    if not isinstance(room, dict):
        logger.error(f"Unexpected Daily API response shape: {response_text}")
        return _failure("Invalid response from Daily API", response_text)

    if not response.is_success or room.get("error"):
        logger.error(
            f"Daily API error: status={response.status_code} "
            f"reason={response.reason_phrase} body={room}"
        )
        return _failure(room.get("error") or DEFAULT_ERROR, room.get("info") or DEFAULT_ERROR_INFO)

    logger.info(f"✅ Room created: {room.get('name')}")
    return ProxyResult(status_code=200, body=room)


async def create_room_from_env(client: httpx.AsyncClient) -> ProxyResult:
    try:
        proxy_config = RoomProxyConfig.from_env()
    except ProxyConfigError as e:
        logger.error(str(e))
        return _failure(str(e))
    return await create_room(proxy_config, client)
