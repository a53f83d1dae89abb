"""Local meeting recorder.

Models the recording flow the meeting page runs in the browser (see the
``/meeting/{room_name}`` page in ``ubuntumeet.shell.pages``). Nothing is
uploaded: ``output_dir`` is the local download folder of the machine that
records, the way the browser saves the ``.webm`` file for the user.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Protocol

from pydantic import BaseModel

from ubuntumeet import config

logger = logging.getLogger(__name__)

MIME_TYPE = "video/webm"
PERMISSION_ALERT = "Could not start recording. Please ensure you grant screen sharing permissions."


class CapturePermissionError(Exception):
    pass


class CaptureStream(Protocol):
    """A screen capture: yields encoded chunks until ``stop`` ends it."""

    def __aiter__(self) -> AsyncIterator[bytes]: ...

    def stop(self) -> None: ...


CaptureSource = Callable[[], Awaitable[CaptureStream]]
Alert = Callable[[str], None]


class RecorderState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class Recording(BaseModel):
    filename: str
    mime_type: str = MIME_TYPE
    data: bytes
    path: Optional[Path] = None


def recording_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"UbuntuMeet-Recording-{stamp}.webm"


class LocalRecorder:
    def __init__(self, capture: CaptureSource, alert: Alert, output_dir: Optional[Path] = None):
        self._capture = capture
        self._alert = alert
        self.output_dir = Path(output_dir or config.RECORDINGS_DIR)
        self.state = RecorderState.IDLE
        self._stream: Optional[CaptureStream] = None
        self._pump: Optional[asyncio.Task] = None
        self._chunks: List[bytes] = []

    @property
    def is_recording(self) -> bool:
        return self.state == RecorderState.RECORDING

    async def start(self) -> bool:
        if self.is_recording:
            return True
        try:
            stream = await self._capture()
        except Exception as e:
            logger.error(f"Error starting recording: {e!r}")
            self._alert(PERMISSION_ALERT)
            return False

        self._chunks = []
        self._stream = stream
        self._pump = asyncio.create_task(self._consume(stream))
        self.state = RecorderState.RECORDING
        logger.info("🔴 Recording started")
        return True

    async def _consume(self, stream: CaptureStream):
        async for chunk in stream:
            self.on_data(chunk)

    def on_data(self, chunk: bytes):
        if chunk:
            self._chunks.append(chunk)

    async def stop(self) -> Optional[Recording]:
        if not self.is_recording:
            return None

        # Stopping the tracks flushes the final chunk and ends the stream
        self._stream.stop()
        try:
            await self._pump
        finally:
            self._stream = None
            self._pump = None
            self.state = RecorderState.IDLE

        recording = Recording(filename=recording_filename(), data=b"".join(self._chunks))
        self._chunks = []
        recording.path = self.save(recording)
        logger.info(f"⏹️ Recording saved to {recording.path} ({len(recording.data)} bytes)")
        return recording

    def save(self, recording: Recording) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / recording.filename
        path.write_bytes(recording.data)
        return path

    async def toggle(self) -> Optional[Recording]:
        if self.is_recording:
            return await self.stop()
        await self.start()
        return None
