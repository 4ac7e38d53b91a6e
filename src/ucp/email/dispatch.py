"""
Notification dispatch.

``deliver`` awaits a single attempt and reports whether the email left.
``dispatch`` fires the attempt as a background task whose failure is only
logged; the dispatcher keeps a reference to every pending task until it
finishes, and ``drain`` waits for all of them on shutdown.
"""

from __future__ import annotations

import asyncio

import structlog

from ucp.email.service import EmailService, get_email_service

logger = structlog.get_logger()


class NotificationDispatcher:
    def __init__(self, email_service: EmailService) -> None:
        self.email_service = email_service
        self._pending: set[asyncio.Task[bool]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def deliver(self, to: str, template_name: str, **context: str) -> bool:
        """Render and send one email, awaiting the attempt."""
        try:
            sent = await self.email_service.send_template(to, template_name, **context)
        except Exception:
            logger.exception("notification_failed", to=to, template=template_name)
            return False
        if not sent:
            logger.warning("notification_failed", to=to, template=template_name)
        return sent

    def dispatch(self, to: str, template_name: str, **context: str) -> asyncio.Task[bool]:
        """Send in the background. The caller never sees the outcome."""
        task = asyncio.create_task(self.deliver(to, template_name, **context))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every background notification still in flight."""
        if not self._pending:
            return
        logger.info("notifications_draining", pending=len(self._pending))
        await asyncio.gather(*self._pending, return_exceptions=True)


_dispatcher: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
    """Get or create the dispatcher singleton (FastAPI dependency)."""
    global _dispatcher  # noqa: PLW0603
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher(get_email_service())
    return _dispatcher


def reset_dispatcher() -> None:
    """Reset the dispatcher singleton (for testing)."""
    global _dispatcher  # noqa: PLW0603
    _dispatcher = None
