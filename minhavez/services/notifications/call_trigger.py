"""Fires the attention effect when a customer's entry goes from waiting to called."""
import logging
from typing import Optional

from minhavez.config.settings import Settings, settings as default_settings
from minhavez.models.queue_entry import QueueStatus
from minhavez.services.notifications.capabilities import ClientCapabilities, NotificationPermission

logger = logging.getLogger(__name__)


class CallNotificationTrigger:
    """
    Notification (only if granted), vibration and sound, once per
    waiting -> called edge. A failing capability does not stop the others.
    """

    def __init__(
        self,
        capabilities: ClientCapabilities,
        business_name: Optional[str] = None,
        settings: Settings = default_settings,
    ):
        self.capabilities = capabilities
        self.business_name = business_name or ""
        self.settings = settings

    async def prepare(self) -> None:
        """Ask for notification permission once if the user has not decided yet."""
        if self.capabilities.notification.permission == NotificationPermission.DEFAULT:
            await self._safely("request_permission", self.capabilities.notification.request_permission())

    async def on_status_change(self, previous, current) -> bool:
        """Returns True when the effect fired."""
        if previous is None or current is None:
            return False
        if QueueStatus(previous) != QueueStatus.WAITING or QueueStatus(current) != QueueStatus.CALLED:
            return False
        await self.fire()
        return True

    async def fire(self) -> None:
        notification = self.capabilities.notification
        if notification.permission == NotificationPermission.GRANTED:
            await self._safely(
                "notify",
                notification.notify(
                    self.settings.CALL_NOTIFICATION_TITLE,
                    f"{self.business_name} está te chamando".strip(),
                    icon=self.settings.CALL_NOTIFICATION_ICON,
                    tag="queue-call",
                    require_interaction=True,
                ),
            )
        await self._safely("vibrate", self.capabilities.vibration.vibrate(self.settings.CALL_VIBRATION_PATTERN))
        await self._safely(
            "play",
            self.capabilities.audio.play(
                self.settings.CALL_SOUND_URL,
                fallback_hz=self.settings.CALL_FALLBACK_BEEP_HZ,
                fallback_ms=self.settings.CALL_FALLBACK_BEEP_MS,
            ),
        )
        logger.info("Call notification fired")

    @staticmethod
    async def _safely(name: str, awaitable) -> None:
        try:
            await awaitable
        except Exception as e:
            logger.warning(f"Call effect '{name}' failed: {e}")
