"""
Tests for the call-object lifecycle and the in-call controls.
"""

import asyncio
from typing import Dict, List

import pytest

from ubuntumeet.meeting.controls import MeetingControls, list_label, tile_label
from ubuntumeet.meeting.session import CallState, MeetingSession, Participant

ROOM_URL = "https://ubuntumeet.daily.co/standup"


class FakeCall:
    """Records every call made on it; ``join`` blocks until released."""

    def __init__(self, join_error=None, leave_error=None):
        self.calls: List[str] = []
        self.join_error = join_error
        self.leave_error = leave_error
        self.join_gate = asyncio.Event()
        self.local = Participant(session_id="local-abcdef", local=True)
        self.remote = Participant(session_id="9f8e7d6c", audio=False)

    async def join(self, url):
        self.calls.append(f"join:{url}")
        await self.join_gate.wait()
        if self.join_error:
            raise self.join_error

    async def leave(self):
        self.calls.append("leave")
        if self.leave_error:
            raise self.leave_error

    async def destroy(self):
        self.calls.append("destroy")

    def set_local_audio(self, enabled):
        self.calls.append(f"audio:{enabled}")

    def set_local_video(self, enabled):
        self.calls.append(f"video:{enabled}")

    def start_screen_share(self):
        self.calls.append("screen:start")

    def stop_screen_share(self):
        self.calls.append("screen:stop")

    def participants(self) -> Dict[str, Participant]:
        return {p.session_id: p for p in (self.local, self.remote)}


@pytest.fixture
def fake_call():
    return FakeCall()


@pytest.mark.asyncio
async def test_missing_url_redirects_without_call_object():
    created = []
    session = MeetingSession("standup", None, lambda: created.append(1) or FakeCall())

    redirect = await session.mount()
    await session.unmount()

    assert redirect == "/dashboard"
    assert created == []
    assert session.state == CallState.UNINITIALIZED


@pytest.mark.asyncio
async def test_join_then_unmount(fake_call):
    session = MeetingSession("standup", ROOM_URL, lambda: fake_call)

    await session.mount()
    assert session.state == CallState.JOINING
    fake_call.join_gate.set()
    await session.wait_joined()
    assert session.state == CallState.JOINED

    await session.unmount()

    assert fake_call.calls == [f"join:{ROOM_URL}", "leave", "destroy"]
    assert session.state == CallState.DESTROYED


@pytest.mark.asyncio
async def test_unmount_while_join_pending_releases_once(fake_call):
    session = MeetingSession("standup", ROOM_URL, lambda: fake_call)
    await session.mount()
    await asyncio.sleep(0)

    await session.unmount()
    await session.unmount()
    await asyncio.sleep(0)

    assert fake_call.calls.count("leave") == 1
    assert fake_call.calls.count("destroy") == 1
    assert fake_call.calls.index("leave") < fake_call.calls.index("destroy")
    assert session.state == CallState.DESTROYED


@pytest.mark.asyncio
async def test_join_failure_is_logged_only():
    call = FakeCall(join_error=RuntimeError("room expired"))
    call.join_gate.set()
    session = MeetingSession("standup", ROOM_URL, lambda: call)

    await session.mount()
    await session.wait_joined()

    assert session.state == CallState.JOINING
    await session.unmount()
    assert call.calls[-2:] == ["leave", "destroy"]


@pytest.mark.asyncio
async def test_destroy_runs_even_if_leave_fails():
    call = FakeCall(leave_error=RuntimeError("already left"))
    session = MeetingSession("standup", ROOM_URL, lambda: call)
    await session.mount()

    await session.unmount()

    assert call.calls[-1] == "destroy"
    assert session.state == CallState.DESTROYED


@pytest.mark.asyncio
async def test_context_manager_releases_on_error(fake_call):
    with pytest.raises(ValueError):
        async with MeetingSession("standup", ROOM_URL, lambda: fake_call):
            raise ValueError("navigation blew up")

    assert fake_call.calls.count("leave") == 1
    assert fake_call.calls.count("destroy") == 1


class TestControls:

    @pytest.mark.asyncio
    async def test_toggles_flip_local_flags(self, fake_call):
        session = MeetingSession("standup", ROOM_URL, lambda: fake_call)
        await session.mount()
        controls = MeetingControls(session)

        fake_call.local.video = False
        controls.toggle_audio()
        controls.toggle_video()

        assert "audio:False" in fake_call.calls
        assert "video:True" in fake_call.calls
        await session.unmount()

    @pytest.mark.asyncio
    async def test_screen_share_and_whiteboard(self, fake_call):
        session = MeetingSession("standup", ROOM_URL, lambda: fake_call)
        await session.mount()
        controls = MeetingControls(session)

        controls.toggle_screen_share()
        controls.toggle_screen_share()

        assert fake_call.calls[-2:] == ["screen:start", "screen:stop"]
        assert controls.toggle_whiteboard() is True
        assert controls.toggle_whiteboard() is False
        await session.unmount()

    @pytest.mark.asyncio
    async def test_toggles_without_call_are_noops(self):
        session = MeetingSession("standup", None, FakeCall)
        await session.mount()
        controls = MeetingControls(session)

        controls.toggle_audio()
        controls.toggle_screen_share()

        assert controls.is_sharing_screen is False

    @pytest.mark.asyncio
    async def test_leave_releases_once_and_returns_dashboard(self, fake_call):
        session = MeetingSession("standup", ROOM_URL, lambda: fake_call)
        await session.mount()
        controls = MeetingControls(session)

        destination = await controls.leave()
        await session.unmount()

        assert destination == "/dashboard"
        assert fake_call.calls.count("leave") == 1
        assert fake_call.calls.count("destroy") == 1

    @pytest.mark.asyncio
    async def test_participant_labels(self, fake_call):
        session = MeetingSession("standup", ROOM_URL, lambda: fake_call)
        await session.mount()

        assert MeetingControls(session).participant_labels() == ["You", "User 9f8e"]
        await session.unmount()


def test_tile_and_list_labels():
    local = Participant(session_id="abcd1234", local=True)

    assert tile_label("abcd1234") == "Participant abcd"
    assert list_label("abcd1234", local) == "You"
    assert list_label("ffff0000", local) == "User ffff"
    assert list_label("ffff0000", None) == "User ffff"
