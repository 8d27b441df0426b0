"""Tests for the "you were called" effect."""
import pytest

from minhavez.services.notifications.call_trigger import CallNotificationTrigger
from minhavez.services.notifications.capabilities import (
    ClientCapabilities,
    NotificationPermission,
    capabilities_from_client,
)
from tests.fakes import recording_capabilities


class TestCallNotificationTrigger:
    @pytest.mark.asyncio
    async def test_fires_on_waiting_to_called(self):
        capabilities, calls = recording_capabilities()
        trigger = CallNotificationTrigger(capabilities, "Barbearia do Zé")

        assert await trigger.on_status_change("waiting", "called") is True

        assert calls == [
            ("notify", "Você foi chamado!", "Barbearia do Zé está te chamando", "queue-call"),
            ("vibrate", [200, 100, 200, 100, 200]),
            ("play", "/notification.mp3", 800, 500),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "previous,current",
        [("called", "called"), ("called", "attending"), ("waiting", "cancelled"), (None, "called")],
    )
    async def test_other_edges_do_nothing(self, previous, current):
        capabilities, calls = recording_capabilities()
        trigger = CallNotificationTrigger(capabilities, "X")

        assert await trigger.on_status_change(previous, current) is False
        assert calls == []

    @pytest.mark.asyncio
    async def test_denied_permission_still_vibrates_and_plays(self):
        capabilities, calls = recording_capabilities(NotificationPermission.DENIED)
        trigger = CallNotificationTrigger(capabilities, "X")

        await trigger.on_status_change("waiting", "called")

        assert [call[0] for call in calls] == ["vibrate", "play"]

    @pytest.mark.asyncio
    async def test_failing_audio_does_not_raise(self):
        capabilities, calls = recording_capabilities(audio_fails=True)
        trigger = CallNotificationTrigger(capabilities, "X")

        await trigger.fire()
        assert [call[0] for call in calls] == ["notify", "vibrate"]

    @pytest.mark.asyncio
    async def test_prepare_requests_permission_only_when_undecided(self):
        capabilities, calls = recording_capabilities(NotificationPermission.DEFAULT)
        await CallNotificationTrigger(capabilities).prepare()
        assert calls == [("request_permission",)]

        capabilities, calls = recording_capabilities(NotificationPermission.GRANTED)
        await CallNotificationTrigger(capabilities).prepare()
        assert calls == []

    @pytest.mark.asyncio
    async def test_no_capabilities_is_silent(self):
        trigger = CallNotificationTrigger(ClientCapabilities.none(), "X")
        assert await trigger.on_status_change("waiting", "called") is True


class TestWebSocketCapabilities:
    @pytest.mark.asyncio
    async def test_instructions_sent_to_client(self):
        sent = []

        async def send(message):
            sent.append(message)

        capabilities = capabilities_from_client(
            send, {"type": "capabilities", "notification_permission": "granted", "vibrate": True, "audio": True}
        )
        await CallNotificationTrigger(capabilities, "Bar do Beto").fire()

        assert [m["type"] for m in sent] == ["notification", "vibrate", "play_sound"]
        assert sent[0]["body"] == "Bar do Beto está te chamando"
        assert sent[0]["tag"] == "queue-call"
        assert sent[0]["require_interaction"] is True
        assert sent[2]["fallback"] == {"frequency": 800, "duration_ms": 500}

    @pytest.mark.asyncio
    async def test_unreported_capabilities_are_absent(self):
        sent = []

        async def send(message):
            sent.append(message)

        capabilities = capabilities_from_client(send, {"type": "capabilities", "audio": True})
        await CallNotificationTrigger(capabilities, "X").fire()

        assert [m["type"] for m in sent] == ["play_sound"]

    def test_unknown_permission_treated_as_denied(self):
        async def send(message):
            pass

        capabilities = capabilities_from_client(send, {"notification_permission": "maybe"})
        assert capabilities.notification.permission == NotificationPermission.DENIED
