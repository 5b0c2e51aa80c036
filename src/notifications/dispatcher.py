"""
Best-effort notification fan-out over two independent channels:
email and in-app.

Nothing raised by a transport or the notification store escapes the
dispatcher. Failures are logged and reported as a False result, so the
claim operation that triggered them still succeeds.

With workers > 0 sends run on a bounded thread pool. When every worker is
busy and the queue is full, new notifications are dropped (and logged).
Shutdown discards queued sends and does not wait for running ones.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from ..claims.schema import NotificationCategory, RecipientRole
from ..storage.notification_store import NotificationStore
from ..utils.config import Settings, settings as default_settings
from .email_transport import EmailTransport, create_email_transport
from .templates import EmailMessage

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Send claim emails and record in-app notifications."""

    def __init__(
        self,
        email_transport: EmailTransport,
        notification_store: NotificationStore,
        workers: int = 0,
        queue_size: int = 50,
    ):
        self.email_transport = email_transport
        self.notification_store = notification_store

        self._executor: Optional[ThreadPoolExecutor] = None
        self._slots: Optional[threading.BoundedSemaphore] = None
        if workers > 0:
            self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="notify")
            self._slots = threading.BoundedSemaphore(workers + queue_size)

    @classmethod
    def from_settings(
        cls,
        notification_store: NotificationStore,
        config: Optional[Settings] = None,
    ) -> "NotificationDispatcher":
        config = config or default_settings
        return cls(
            email_transport=create_email_transport(config),
            notification_store=notification_store,
            workers=config.notification_workers,
            queue_size=config.notification_queue_size,
        )

    @property
    def is_background(self) -> bool:
        return self._executor is not None

    def send_email(self, recipient: str, message: EmailMessage) -> bool:
        """
        Send an email.

        Returns:
            True if sent (or accepted by the background pool), False otherwise
        """
        return self._dispatch("email", self.email_transport.send, recipient, message)

    def create_in_app_notification(
        self,
        title: str,
        body: str,
        recipient_id: int,
        recipient_role: RecipientRole,
        category: NotificationCategory = NotificationCategory.CLAIM,
    ) -> bool:
        """
        Record an in-app notification.

        Returns:
            True if stored (or accepted by the background pool), False otherwise
        """
        return self._dispatch(
            "in-app",
            self.notification_store.create,
            title,
            body,
            recipient_id,
            recipient_role,
            category,
        )

    def shutdown(self, wait: bool = False):
        """
        Stop the background pool. Queued sends are discarded.

        Args:
            wait: Block until sends already running have finished
        """
        if self._executor is not None:
            self._executor.shutdown(wait=wait, cancel_futures=True)

    def _dispatch(self, channel: str, send: Callable, *args) -> bool:
        if self._executor is None:
            return self._run(channel, send, *args)

        if not self._slots.acquire(blocking=False):
            logger.warning(f"Notification queue full - dropping {channel} notification")
            return False

        try:
            future = self._executor.submit(self._run, channel, send, *args)
        except RuntimeError as e:
            self._slots.release()
            logger.error(f"Could not queue {channel} notification: {e}")
            return False

        future.add_done_callback(lambda _: self._slots.release())
        return True

    @staticmethod
    def _run(channel: str, send: Callable, *args) -> bool:
        try:
            send(*args)
        except Exception as e:
            logger.error(f"Failed to send {channel} notification: {e}")
            return False
        return True
