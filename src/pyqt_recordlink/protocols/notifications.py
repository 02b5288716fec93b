"""Notification provider protocol for user-visible messages."""

import logging
from typing import Protocol, Optional

logger = logging.getLogger(__name__)


class NotificationProvider(Protocol):
    """Protocol for surfacing messages to the user (toasts, status bars...)."""

    def notify(self, message: str, level: str = "error",
               link_url: Optional[str] = None, link_text: Optional[str] = None) -> None:
        """Show message, optionally with a link the user can follow."""
        ...


class LoggingNotificationProvider:
    """Fallback provider that writes notifications to the log."""

    def notify(self, message: str, level: str = "error",
               link_url: Optional[str] = None, link_text: Optional[str] = None) -> None:
        suffix = f" ({link_text or 'see'}: {link_url})" if link_url else ""
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            log_level = logging.ERROR
        logger.log(log_level, f"{message}{suffix}")


_notification_provider: Optional[NotificationProvider] = None


def register_notification_provider(provider: Optional[NotificationProvider]) -> None:
    """Register a global notification provider."""
    global _notification_provider
    _notification_provider = provider


def get_notification_provider() -> NotificationProvider:
    """Get the registered notification provider, or the logging fallback."""
    if _notification_provider is None:
        return LoggingNotificationProvider()
    return _notification_provider
