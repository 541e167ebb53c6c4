"""
Service dependency injection.

Services are built once by ``create_app`` and stored on ``app.state``.
"""

from fastapi import Request

from wahook.services.call_service import CallService
from wahook.services.messaging_service import MessagingService


async def get_messaging_service(request: Request) -> MessagingService:
    return request.app.state.messaging_service


async def get_call_service(request: Request) -> CallService:
    return request.app.state.call_service
