"""
Event context management using contextvars for automatic propagation.

The context is set once when an inbound event (or an HTTP action) starts being
handled and is automatically available to every logger used while handling it.
"""

from contextvars import ContextVar

_chat_context: ContextVar[str | None] = ContextVar("chat_id", default=None)
_sender_context: ContextVar[str | None] = ContextVar("sender_id", default=None)


def set_event_context(
    chat_id: str | None = None,
    sender_id: str | None = None,
) -> None:
    """
    Set the event context for the current async context.

    Args:
        chat_id: Chat identity (individual or group JID) being handled
        sender_id: Sender identity of the event
    """
    if chat_id is not None:
        _chat_context.set(chat_id)
    if sender_id is not None:
        _sender_context.set(sender_id)


def get_current_chat_context() -> str | None:
    """Get the current chat identity from context variables."""
    return _chat_context.get()


def get_current_sender_context() -> str | None:
    """Get the current sender identity from context variables."""
    return _sender_context.get()


def clear_event_context() -> None:
    """
    Clear the event context.

    Context is isolated per task already, this is mostly useful for testing.
    """
    _chat_context.set(None)
    _sender_context.set(None)

