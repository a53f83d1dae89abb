"""In-call controls and participant labels.

Python model of the controls the meeting page wires up in the browser; the
served page drives the same actions through daily-js.
"""

from typing import List, Optional

from ubuntumeet.meeting.session import DASHBOARD_PATH, MeetingSession, Participant


def short_id(session_id: str) -> str:
    return session_id[:4]


def tile_label(session_id: str) -> str:
    return f"Participant {short_id(session_id)}"


def list_label(session_id: str, local: Optional[Participant]) -> str:
    if local is not None and session_id == local.session_id:
        return "You"
    return f"User {short_id(session_id)}"


class MeetingControls:
    """In-call actions; each one calls straight into the session's call object."""

    def __init__(self, session: MeetingSession):
        self.session = session
        self.show_whiteboard = False
        self.is_sharing_screen = False

    def toggle_audio(self):
        local = self.session.local_participant()
        if self.session.call is None or local is None:
            return
        self.session.call.set_local_audio(not local.audio)

    def toggle_video(self):
        local = self.session.local_participant()
        if self.session.call is None or local is None:
            return
        self.session.call.set_local_video(not local.video)

    def toggle_screen_share(self):
        if self.session.call is None:
            return
        if self.is_sharing_screen:
            self.session.call.stop_screen_share()
        else:
            self.session.call.start_screen_share()
        self.is_sharing_screen = not self.is_sharing_screen

    def toggle_whiteboard(self) -> bool:
        self.show_whiteboard = not self.show_whiteboard
        return self.show_whiteboard

    def participant_labels(self) -> List[str]:
        local = self.session.local_participant()
        return [list_label(session_id, local) for session_id in self.session.participant_ids()]

    async def leave(self) -> str:
        await self.session.unmount()
        return DASHBOARD_PATH
