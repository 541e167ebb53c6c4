"""
wahook - WhatsApp to webhook bridge

Classifies inbound WhatsApp events, forwards them as signed JSON webhooks to
every configured subscriber, and exposes outbound actions over HTTP.
"""

from .api.app import create_app
from .core.config.settings import Settings, settings
from .domain.interfaces.whatsapp_client import IWhatsAppClient
from .schemas.whatsapp.events import InboundEvent

__version__ = settings.version

__all__ = [
    "create_app",
    "IWhatsAppClient",
    "InboundEvent",
    "Settings",
    "settings",
]
