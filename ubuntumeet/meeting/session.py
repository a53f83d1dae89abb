"""Meeting page call lifecycle: join on mount, leave then destroy once on unmount."""

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DASHBOARD_PATH = "/dashboard"


class CallState(str, Enum):
    UNINITIALIZED = "uninitialized"
    JOINING = "joining"
    JOINED = "joined"
    LEAVING = "leaving"
    DESTROYED = "destroyed"


class Participant(BaseModel):
    session_id: str
    local: bool = False
    audio: bool = True
    video: bool = True
    screen: bool = False


class CallObject(Protocol):
    """The slice of the Daily call object the meeting page drives."""

    async def join(self, url: str) -> None: ...

    async def leave(self) -> None: ...

    async def destroy(self) -> None: ...

    def set_local_audio(self, enabled: bool) -> None: ...

    def set_local_video(self, enabled: bool) -> None: ...

    def start_screen_share(self) -> None: ...

    def stop_screen_share(self) -> None: ...

    def participants(self) -> Dict[str, Participant]: ...


CallFactory = Callable[[], CallObject]


class MeetingSession:
    """Owns one call object from mount to unmount.

    ``unmount`` leaves then destroys the call exactly once, whether or not the
    join finished. Use it as an async context manager to get that on every
    exit path.
    """

    def __init__(self, room_name: str, url: Optional[str], call_factory: CallFactory):
        self.room_name = room_name
        self.url = url
        self._call_factory = call_factory
        self.call: Optional[CallObject] = None
        self.state = CallState.UNINITIALIZED
        self.redirect_to: Optional[str] = None
        self._join_task: Optional[asyncio.Task] = None
        self._released = False

    async def mount(self) -> Optional[str]:
        if self.call is not None or self.redirect_to:
            return self.redirect_to
        if not self.url:
            self.redirect_to = DASHBOARD_PATH
            return self.redirect_to

        self.call = self._call_factory()
        self.state = CallState.JOINING
        self._join_task = asyncio.create_task(self._join(self.call, self.url))
        return None

    async def _join(self, call: CallObject, url: str):
        try:
            await call.join(url)
        except Exception as e:
            logger.error(f"Error joining call {self.room_name}: {e!r}")
            return
        if self.state == CallState.JOINING:
            self.state = CallState.JOINED
            logger.info(f"Joined call {self.room_name}")

    async def wait_joined(self):
        if self._join_task is not None:
            await asyncio.shield(self._join_task)

    async def unmount(self):
        if self._released or self.call is None:
            return
        self._released = True
        self.state = CallState.LEAVING
        try:
            await self.call.leave()
        except Exception as e:
            logger.error(f"Error leaving call {self.room_name}: {e!r}")
        finally:
            await self.call.destroy()
            self.state = CallState.DESTROYED
            if self._join_task is not None and not self._join_task.done():
                self._join_task.cancel()
            logger.info(f"Released call {self.room_name}")

    def local_participant(self) -> Optional[Participant]:
        if self.call is None:
            return None
        for participant in self.call.participants().values():
            if participant.local:
                return participant
        return None

    def participant_ids(self):
        if self.call is None:
            return []
        return list(self.call.participants().keys())

    async def __aenter__(self):
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.unmount()
