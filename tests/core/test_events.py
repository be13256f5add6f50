"""Tests for domain event objects."""

import dataclasses

import pytest

from core.events import IssueCreated, IssueEvent, SupportEvent


class TestIssueCreated:

    def test_create_carries_issue_and_message(self, issue):
        event = IssueCreated.create(issue=issue, message="Can't log in")

        assert event.issue is issue
        assert event.message == "Can't log in"

    def test_message_defaults_to_empty(self, issue):
        assert IssueCreated.create(issue=issue).message == ""

    def test_has_identity_and_timestamp(self, issue):
        event = IssueCreated.create(issue=issue)

        assert event.event_id
        assert event.occurred_at.tzinfo is not None

    def test_each_event_has_distinct_id(self, issue):
        assert IssueCreated.create(issue=issue).event_id != IssueCreated.create(issue=issue).event_id

    def test_is_immutable(self, issue):
        event = IssueCreated.create(issue=issue)

        with pytest.raises(dataclasses.FrozenInstanceError):
            event.message = "changed"

    def test_hierarchy(self, issue):
        event = IssueCreated.create(issue=issue)

        assert isinstance(event, IssueEvent)
        assert isinstance(event, SupportEvent)
