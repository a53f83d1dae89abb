from pydantic import BaseModel, ConfigDict
from typing import Optional, Union


class RoomProperties(BaseModel):
    exp: int
    enable_screenshare: bool = True
    enable_recording: Union[str, bool] = "local"
    enable_chat: bool = True
    start_video_off: bool = False
    start_audio_off: bool = False


class RoomRequest(BaseModel):
    privacy: str = "public"
    properties: RoomProperties


class RoomDescriptor(BaseModel):
    # Provider-owned; anything beyond name/url is passed through untouched
    model_config = ConfigDict(extra="allow")

    name: str
    url: str
    exp: Optional[int] = None
    properties: dict = {}
