"""
Outbound action endpoints.

- POST /send/message:        text message, optional quote
- POST /send-presence:       typing / recording indicator
- POST /call-ended:          reject a call once and notify subscribers
- POST /chat/send/{audio,document,video,image,location}
- POST /chat/delete-message: revoke for everyone
- POST /chat/mark-read:      read / played receipt
"""

from fastapi import APIRouter, Depends

from wahook.api.dependencies import get_call_service, get_messaging_service
from wahook.api.models import (
    CallEndedRequest,
    CallEndedResponse,
    DeleteMessageRequest,
    ErrorResponse,
    MarkReadRequest,
    SendAudioRequest,
    SendDocumentRequest,
    SendImageRequest,
    SendLocationRequest,
    SendMessageRequest,
    SendPresenceRequest,
    SendVideoRequest,
    StatusResponse,
)
from wahook.services.call_service import CallService
from wahook.services.messaging_service import MessagingService

router = APIRouter(
    tags=["Actions"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Invalid input"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    },
)


@router.post("/send/message", response_model=StatusResponse, summary="Send Text Message")
async def send_message(
    request: SendMessageRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.send_text(
        message=request.message,
        phone=request.phone,
        jid=request.jid,
        reply_message_id=request.reply_message_id,
    )
    return StatusResponse(status=result.status)


@router.post("/send-presence", response_model=StatusResponse, summary="Send Chat Presence")
async def send_presence(
    request: SendPresenceRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.send_presence(request.phone, request.presence, request.duration)
    return StatusResponse(status=result.status)


@router.post("/call-ended", response_model=CallEndedResponse, summary="Handle Ended Call")
async def call_ended(
    request: CallEndedRequest,
    service: CallService = Depends(get_call_service),
) -> CallEndedResponse:
    """
    Reject the call and notify subscribers.

    Repeated notifications for the same call within the dedup window answer
    ``call rejected (already processed)`` without touching the client.
    """
    result = await service.handle_call_ended(request.call_id, request.phone)
    return CallEndedResponse(status=result.status, call_id=result.call_id, phone=result.phone)


@router.post("/chat/send/audio", response_model=StatusResponse, summary="Send Audio")
async def send_audio(
    request: SendAudioRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.send_audio(request.phone, request.media)
    return StatusResponse(status=result.status)


@router.post("/chat/send/document", response_model=StatusResponse, summary="Send Document")
async def send_document(
    request: SendDocumentRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.send_document(
        phone=request.phone,
        document_path=request.document_path,
        file_name=request.file_name,
        caption=request.caption,
        is_forwarded=request.is_forwarded,
    )
    return StatusResponse(status=result.status)


@router.post("/chat/send/video", response_model=StatusResponse, summary="Send Video")
async def send_video(
    request: SendVideoRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.send_video(
        phone=request.phone,
        video_path=request.video_path,
        caption=request.caption,
        view_once=request.view_once,
        is_forwarded=request.is_forwarded,
    )
    return StatusResponse(status=result.status)


@router.post("/chat/send/image", response_model=StatusResponse, summary="Send Image")
async def send_image(
    request: SendImageRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.send_image(
        phone=request.phone,
        image_path=request.image_path,
        caption=request.caption,
        view_once=request.view_once,
        is_forwarded=request.is_forwarded,
    )
    return StatusResponse(status=result.status)


@router.post("/chat/send/location", response_model=StatusResponse, summary="Send Location")
async def send_location(
    request: SendLocationRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.send_location(request.phone, request.latitude, request.longitude)
    return StatusResponse(status=result.status)


@router.post("/chat/delete-message", response_model=StatusResponse, summary="Revoke Message")
async def delete_message(
    request: DeleteMessageRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.delete_message(request.phone, request.message_id)
    return StatusResponse(status=result.status)


@router.post("/chat/mark-read", response_model=StatusResponse, summary="Mark Message Read")
async def mark_read(
    request: MarkReadRequest,
    service: MessagingService = Depends(get_messaging_service),
) -> StatusResponse:
    result = await service.mark_read(
        request.phone, request.message_id, sender=request.sender, played=request.played
    )
    return StatusResponse(status=result.status)
