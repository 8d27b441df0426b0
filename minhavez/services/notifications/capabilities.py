"""
Client capability providers for the "you were called" effect.

Browsers may lack notifications, vibration or audio, or the user may deny
permission. Each capability is an injected object with a no-op
implementation, so callers never check the environment themselves.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List

logger = logging.getLogger(__name__)


class NotificationPermission(str, Enum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class NotificationCapability(ABC):
    """System notification (Notification API on the browser side)."""

    @property
    @abstractmethod
    def permission(self) -> NotificationPermission:
        pass

    @abstractmethod
    async def request_permission(self) -> None:
        pass

    @abstractmethod
    async def notify(self, title: str, body: str, *, icon: str, tag: str, require_interaction: bool = True) -> None:
        pass


class VibrationCapability(ABC):
    @abstractmethod
    async def vibrate(self, pattern: List[int]) -> None:
        pass


class AudioCapability(ABC):
    @abstractmethod
    async def play(self, url: str, *, fallback_hz: int, fallback_ms: int) -> None:
        """Play `url`; the client synthesises a beep of fallback_hz/fallback_ms if the asset fails."""
        pass


class NullNotification(NotificationCapability):
    @property
    def permission(self) -> NotificationPermission:
        return NotificationPermission.DENIED

    async def request_permission(self) -> None:
        return None

    async def notify(self, title, body, *, icon, tag, require_interaction=True) -> None:
        return None


class NullVibration(VibrationCapability):
    async def vibrate(self, pattern) -> None:
        return None


class NullAudio(AudioCapability):
    async def play(self, url, *, fallback_hz, fallback_ms) -> None:
        return None


@dataclass
class ClientCapabilities:
    notification: NotificationCapability = field(default_factory=NullNotification)
    vibration: VibrationCapability = field(default_factory=NullVibration)
    audio: AudioCapability = field(default_factory=NullAudio)

    @classmethod
    def none(cls) -> "ClientCapabilities":
        return cls()


SendJson = Callable[[Dict[str, Any]], Awaitable[None]]


class WebSocketNotification(NotificationCapability):
    """Asks the connected browser to show a notification."""

    def __init__(self, send: SendJson, permission: NotificationPermission):
        self._send = send
        self._permission = permission

    @property
    def permission(self) -> NotificationPermission:
        return self._permission

    def update_permission(self, permission: NotificationPermission) -> None:
        self._permission = permission

    async def request_permission(self) -> None:
        await self._send({"type": "request_notification_permission"})

    async def notify(self, title, body, *, icon, tag, require_interaction=True) -> None:
        await self._send({
            "type": "notification",
            "title": title,
            "body": body,
            "icon": icon,
            "tag": tag,
            "require_interaction": require_interaction,
        })


class WebSocketVibration(VibrationCapability):
    def __init__(self, send: SendJson):
        self._send = send

    async def vibrate(self, pattern) -> None:
        await self._send({"type": "vibrate", "pattern": list(pattern)})


class WebSocketAudio(AudioCapability):
    def __init__(self, send: SendJson):
        self._send = send

    async def play(self, url, *, fallback_hz, fallback_ms) -> None:
        await self._send({
            "type": "play_sound",
            "url": url,
            "fallback": {"frequency": fallback_hz, "duration_ms": fallback_ms},
        })


def capabilities_from_client(send: SendJson, hello: Dict[str, Any]) -> ClientCapabilities:
    """
    Build providers from the capabilities message the browser sends on connect:
    {"type": "capabilities", "notification_permission": "default", "vibrate": true, "audio": true}
    Anything the client does not report is treated as absent.
    """
    raw_permission = hello.get("notification_permission")
    capabilities = ClientCapabilities.none()

    if raw_permission is not None:
        try:
            permission = NotificationPermission(raw_permission)
        except ValueError:
            logger.debug(f"Unknown notification permission '{raw_permission}', treating as denied")
            permission = NotificationPermission.DENIED
        capabilities.notification = WebSocketNotification(send, permission)
    if hello.get("vibrate"):
        capabilities.vibration = WebSocketVibration(send)
    if hello.get("audio"):
        capabilities.audio = WebSocketAudio(send)
    return capabilities
