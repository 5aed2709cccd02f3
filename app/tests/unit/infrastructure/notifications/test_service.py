"""Unit tests for NotificationService."""

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from infrastructure.notifications.channels import (
    EmailChannel,
    SMSChannel,
    WhatsAppChannel,
)
from infrastructure.notifications.models import (
    ChannelName,
    DeliveryStats,
    ServiceStatus,
    StatsWindow,
)
from infrastructure.notifications.service import NotificationService


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def service(mock_settings, channels, clock, sleep):
    svc = NotificationService(mock_settings, channels=channels, clock=clock, sleep=sleep)
    yield svc
    svc.shutdown()


@pytest.mark.unit
class TestNotificationServiceInit:
    """Tests for service construction."""

    def test_default_channels_from_settings(self, mock_settings):
        """Without explicit channels the Twilio and Resend adapters are created."""
        svc = NotificationService(mock_settings)

        assert isinstance(svc.channels[ChannelName.WHATSAPP], WhatsAppChannel)
        assert isinstance(svc.channels[ChannelName.SMS], SMSChannel)
        assert isinstance(svc.channels[ChannelName.EMAIL], EmailChannel)

    def test_components_use_settings(self, mock_settings, channels):
        """Messaging settings flow into the components."""
        mock_settings.messaging.batch_size = 4
        mock_settings.messaging.sweep_interval_seconds = 30
        mock_settings.messaging.deferral_seconds = 120

        svc = NotificationService(mock_settings, channels=channels)

        assert svc.bulk.batch_size == 4
        assert svc.scheduler.sweep_interval_seconds == 30
        assert svc.gate.deferral == timedelta(seconds=120)
        assert svc.executor.app_url == "https://choreminder.test"

    def test_instances_do_not_share_state(self, mock_settings, channels, request_factory):
        """Rate limits and statistics belong to one service instance."""
        first = NotificationService(mock_settings, channels=channels)
        second = NotificationService(mock_settings, channels=channels)

        first.submit(request_factory())

        assert first.stats().total == 1
        assert second.stats().total == 0
        assert second.gate.active_limiters() == 0


@pytest.mark.unit
class TestSubmit:
    """Tests for NotificationService.submit."""

    def test_submit_delivers(self, service, channels, request_factory):
        """A regular request is delivered through the primary channel."""
        result = service.submit(request_factory())

        assert result.success is True
        assert result.channel == ChannelName.WHATSAPP
        channels[ChannelName.WHATSAPP].send.assert_called_once()

    def test_submit_deferred_then_processed(self, service, channels, request_factory, fixed_now, clock):
        """A scheduled request is delivered by process_scheduled once due."""
        result = service.submit(request_factory(schedule_at=fixed_now + timedelta(minutes=10)))
        assert result.is_deferred

        clock.advance(minutes=10)
        assert service.process_scheduled() == 1
        channels[ChannelName.WHATSAPP].send.assert_called_once()

    def test_upcoming(self, service, request_factory, fixed_now):
        """Deferred requests due within the horizon are listed soonest first."""
        later = request_factory(schedule_at=fixed_now + timedelta(hours=3))
        sooner = request_factory(schedule_at=fixed_now + timedelta(hours=1))
        service.submit(later)
        service.submit(sooner)
        service.submit(request_factory(schedule_at=fixed_now + timedelta(days=2)))

        assert [r.request_id for r in service.upcoming()] == [
            sooner.request_id,
            later.request_id,
        ]
        assert len(service.upcoming(hours=72)) == 3

    def test_channel_limits_from_settings(self, mock_settings, channels):
        """Per-channel hourly limits come from messaging settings."""
        mock_settings.messaging.sms_hourly_limit = 2

        svc = NotificationService(mock_settings, channels=channels)

        assert svc.gate.channel_limit(ChannelName.SMS) == 2
        assert svc.gate.channel_limit(ChannelName.WHATSAPP) == 20

    def test_cancel(self, service, channels, request_factory, fixed_now):
        """A deferred request can be cancelled through the service."""
        request = request_factory(schedule_at=fixed_now + timedelta(minutes=10))
        service.submit(request)

        assert service.cancel(request.request_id) is True
        assert service.process_scheduled(now=fixed_now + timedelta(hours=1)) == 0
        channels[ChannelName.WHATSAPP].send.assert_not_called()


@pytest.mark.unit
class TestSendBulk:
    """Tests for NotificationService.send_bulk."""

    def test_send_bulk(self, service, request_factory, recipient_factory, sleep):
        """Every request gets a result, in order, with a pause between batches."""
        requests = [
            request_factory(recipient=recipient_factory(user_id=f"user-{i}"))
            for i in range(12)
        ]

        results = service.send_bulk(requests)

        assert [r.request_id for r in results] == [r.request_id for r in requests]
        assert all(r.success for r in results)
        sleep.assert_called_once_with(1.0)

    def test_send_bulk_isolates_failures(self, service, channels, request_factory, sleep):
        """An adapter failing for every channel only fails that result."""
        channels[ChannelName.WHATSAPP].send.side_effect = [RuntimeError("boom")] + [
            channels[ChannelName.WHATSAPP].send.return_value
        ] * 2
        channels[ChannelName.SMS].send.side_effect = RuntimeError("sms down")
        channels[ChannelName.EMAIL].send.side_effect = RuntimeError("email down")
        service.bulk.batch_size = 1

        results = service.send_bulk([request_factory() for _ in range(3)])

        assert [r.success for r in results] == [False, True, True]
        assert results[0].error == "all delivery channels failed"

    def test_send_bulk_failure_uses_service_clock(self, service, request_factory, fixed_now):
        """A submission that raises is timestamped with the injected clock."""
        with patch.object(service.scheduler, "submit", side_effect=RuntimeError("boom")):
            results = service.send_bulk([request_factory()])

        assert results[0].success is False
        assert results[0].error == "boom"
        assert results[0].delivered_at == fixed_now


@pytest.mark.unit
class TestStatsAndStatus:
    """Tests for stats and service_status."""

    def test_stats(self, service, request_factory):
        """Delivered requests show up in the statistics."""
        for _ in range(3):
            service.submit(request_factory())

        stats = service.stats(StatsWindow.HOUR)

        assert isinstance(stats, DeliveryStats)
        assert stats.total == 3
        assert stats.successful == 3
        assert stats.by_channel[ChannelName.WHATSAPP] == 3
        assert stats.avg_attempts == 1

    def test_stats_default_window(self, service):
        """The default window is one day."""
        assert service.stats().window == StatsWindow.DAY

    def test_deferred_requests_not_counted(self, service, request_factory, fixed_now):
        """Deferred submissions are not delivery results."""
        service.submit(request_factory(schedule_at=fixed_now + timedelta(hours=1)))
        assert service.stats().total == 0

    def test_service_status(self, service, channels, request_factory, fixed_now):
        """The status reports channels, queue, limiters and tracked results."""
        channels[ChannelName.EMAIL].service_info.return_value = {"configured": False}
        service.submit(request_factory())
        service.submit(request_factory(schedule_at=fixed_now + timedelta(hours=1)))

        status = service.service_status()

        assert isinstance(status, ServiceStatus)
        assert status.per_channel == {
            ChannelName.WHATSAPP: {"configured": True},
            ChannelName.SMS: {"configured": True},
            ChannelName.EMAIL: {"configured": False},
        }
        assert status.queue_size == 1
        assert status.active_rate_limiters == 1
        assert status.tracked_results == 1
        assert status.sweeper_running is False


@pytest.mark.unit
class TestLifecycle:
    """Tests for start, shutdown and the context manager."""

    def test_context_manager(self, mock_settings, channels):
        """The sweeper runs inside the with block only."""
        svc = NotificationService(mock_settings, channels=channels)

        with svc as running:
            assert running is svc
            assert svc.service_status().sweeper_running is True

        assert svc.service_status().sweeper_running is False

    def test_shutdown_closes_bulk_pool(self, mock_settings, channels, request_factory):
        """After shutdown bulk sends are refused."""
        svc = NotificationService(mock_settings, channels=channels)
        svc.start()
        svc.shutdown()

        with pytest.raises(RuntimeError):
            svc.send_bulk([request_factory()])
