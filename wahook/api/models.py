"""
Request and response models for the action endpoints.

Field aliases keep the JSON field names existing callers already send
(``Phone``, ``DocumentPath``, ``message_id`` ...).
"""

from pydantic import BaseModel, ConfigDict, Field


class ActionRequest(BaseModel):
    """Base for action requests: accept both aliases and field names."""

    model_config = ConfigDict(populate_by_name=True)


class SendMessageRequest(ActionRequest):
    phone: str | None = Field(default=None, alias="Phone")
    jid: str | None = Field(
        default=None, alias="Jid", description="Chat JID, takes precedence over Phone"
    )
    message: str = ""
    reply_message_id: str | None = None


class SendPresenceRequest(ActionRequest):
    phone: str = Field(default="", alias="Phone")
    presence: str = Field(default="", description="'typing' or 'recording'")
    duration: int = Field(default=0, ge=0, description="Seconds before sending 'paused'")


class CallEndedRequest(ActionRequest):
    call_id: str = ""
    phone: str = Field(default="", alias="Phone")


class SendAudioRequest(ActionRequest):
    phone: str = Field(default="", alias="Phone")
    media: str = Field(default="", description="data:audio/...;base64 URI or file path")


class SendDocumentRequest(ActionRequest):
    phone: str = Field(default="", alias="Phone")
    file_name: str | None = Field(default=None, alias="FileName")
    caption: str | None = Field(default=None, alias="Caption")
    document_path: str = Field(default="", alias="DocumentPath")
    is_forwarded: bool = False


class SendVideoRequest(ActionRequest):
    phone: str = Field(default="", alias="Phone")
    caption: str | None = Field(default=None, alias="Caption")
    video_path: str = Field(default="", alias="VideoPath")
    view_once: bool = False
    is_forwarded: bool = False


class SendImageRequest(ActionRequest):
    phone: str = Field(default="", alias="Phone")
    caption: str | None = Field(default=None, alias="Caption")
    image_path: str = Field(default="", alias="ImagePath")
    view_once: bool = False
    is_forwarded: bool = False


class SendLocationRequest(ActionRequest):
    phone: str = Field(default="", alias="Phone")
    latitude: float = 0.0
    longitude: float = 0.0


class DeleteMessageRequest(ActionRequest):
    phone: str = Field(default="", alias="Phone")
    message_id: str = ""


class MarkReadRequest(ActionRequest):
    phone: str = Field(default="", alias="Phone")
    message_id: str = ""
    sender: str | None = None
    played: bool = False


class StatusResponse(BaseModel):
    status: str


class CallEndedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    call_id: str
    phone: str = Field(..., alias="Phone")


class ErrorResponse(BaseModel):
    error: str
