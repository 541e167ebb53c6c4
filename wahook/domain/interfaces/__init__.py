from .whatsapp_client import IWhatsAppClient

__all__ = ["IWhatsAppClient"]
