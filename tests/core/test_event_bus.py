"""Tests for EventBus."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from core.event_bus import EventBus
from core.events import IssueCreated


# =============================================================================
# SUBSCRIBE AND PUBLISH
# =============================================================================


class TestSubscribeAndPublish:

    def test_single_handler_receives_the_exact_event_object(self, issue):
        bus = EventBus()
        received = []
        bus.subscribe("IssueCreated", received.append)

        event = IssueCreated.create(issue=issue)
        bus.publish(event)

        assert len(received) == 1
        assert received[0] is event

    def test_multiple_handlers_called_in_subscription_order(self, issue):
        bus = EventBus()
        order = []
        bus.subscribe("IssueCreated", lambda e: order.append("A"))
        bus.subscribe("IssueCreated", lambda e: order.append("B"))
        bus.subscribe("IssueCreated", lambda e: order.append("C"))

        bus.publish(IssueCreated.create(issue=issue))

        assert order == ["A", "B", "C"]

    def test_type_isolation_only_matching_subscribers_called(self, issue):
        bus = EventBus()
        issue_calls = []
        other_calls = []
        bus.subscribe("IssueCreated", issue_calls.append)
        bus.subscribe("IssueStateChanged", other_calls.append)

        bus.publish(IssueCreated.create(issue=issue))

        assert len(issue_calls) == 1
        assert other_calls == []

    def test_no_subscribers_does_not_raise(self, issue):
        EventBus().publish(IssueCreated.create(issue=issue))


# =============================================================================
# FAILURE ISOLATION
# =============================================================================


class TestHandlerFailures:

    def test_failing_handler_does_not_propagate(self, issue):
        bus = EventBus()

        def explode(event):
            raise RuntimeError("gateway down")

        bus.subscribe("IssueCreated", explode)

        bus.publish(IssueCreated.create(issue=issue))

    def test_later_handlers_still_run(self, issue):
        bus = EventBus()
        received = []

        def explode(event):
            raise RuntimeError("gateway down")

        bus.subscribe("IssueCreated", explode)
        bus.subscribe("IssueCreated", received.append)

        bus.publish(IssueCreated.create(issue=issue))

        assert len(received) == 1

    def test_failure_is_logged_with_handler_and_event_id(self, issue, caplog):
        bus = EventBus()

        def send_issue_receipt(event):
            raise RuntimeError("gateway down")

        bus.subscribe("IssueCreated", send_issue_receipt)
        event = IssueCreated.create(issue=issue)

        with caplog.at_level(logging.ERROR, logger="core.event_bus"):
            bus.publish(event)

        assert "send_issue_receipt" in caplog.text
        assert event.event_id in caplog.text
        assert "gateway down" in caplog.text


# =============================================================================
# EXECUTOR DISPATCH
# =============================================================================


class TestExecutorDispatch:

    def test_handlers_run_on_executor_threads(self, issue):
        received = []
        done = threading.Event()

        def handler(event):
            received.append(threading.current_thread().name)
            done.set()

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="notify") as executor:
            bus = EventBus(executor=executor)
            bus.subscribe("IssueCreated", handler)
            bus.publish(IssueCreated.create(issue=issue))
            assert done.wait(timeout=5)

        assert received[0].startswith("notify")

    def test_publish_returns_before_slow_handler_finishes(self, issue):
        release = threading.Event()
        finished = []

        def slow(event):
            release.wait(timeout=5)
            finished.append(event)

        with ThreadPoolExecutor(max_workers=1) as executor:
            bus = EventBus(executor=executor)
            bus.subscribe("IssueCreated", slow)
            bus.publish(IssueCreated.create(issue=issue))

            assert finished == []
            release.set()

        assert len(finished) == 1

    def test_executor_failures_are_logged_not_raised(self, issue, caplog):
        def explode(event):
            raise RuntimeError("gateway down")

        with caplog.at_level(logging.ERROR, logger="core.event_bus"):
            with ThreadPoolExecutor(max_workers=1) as executor:
                bus = EventBus(executor=executor)
                bus.subscribe("IssueCreated", explode)
                bus.publish(IssueCreated.create(issue=issue))

        assert "explode raised while handling IssueCreated" in caplog.text

    def test_publish_after_shutdown_is_logged(self, issue, caplog):
        executor = ThreadPoolExecutor(max_workers=1)
        executor.shutdown()
        bus = EventBus(executor=executor)
        bus.subscribe("IssueCreated", lambda e: None)

        with caplog.at_level(logging.ERROR, logger="core.event_bus"):
            bus.publish(IssueCreated.create(issue=issue))

        assert "executor is shut down" in caplog.text
