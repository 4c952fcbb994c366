"""
Unit Tests for Stage Event Recorder
"""
import logging
from datetime import timezone

from leadstage.domain.models.lead_ref import LeadRef
from leadstage.domain.services.stage_event_recorder import (
    StageEventRecorder,
    StageEventType,
    get_stage_event_recorder,
)


class TestStageEventRecorder:
    """Tests for StageEventRecorder"""

    def test_record_returns_event(self):
        recorder = StageEventRecorder()
        lead = LeadRef.legacy(3)

        event = recorder.record(StageEventType.STAGE_UPDATED, lead, from_stage=10, to_stage=11)

        assert event.lead == "legacy_3"
        assert event.detail == {"from_stage": 10, "to_stage": 11}
        assert not event.is_error
        assert event.occurred_at.tzinfo is timezone.utc

    def test_errors_are_flagged(self):
        recorder = StageEventRecorder()
        event = recorder.record(StageEventType.SOURCE_QUERY_FAILED, "legacy_3", source="emails")
        assert event.is_error

    def test_history_is_bounded_but_counts_are_not(self):
        recorder = StageEventRecorder(history_size=3)

        for _ in range(5):
            recorder.record(StageEventType.NO_TRANSITION, "legacy_1")

        assert len(recorder.recent()) == 3
        assert recorder.count(StageEventType.NO_TRANSITION) == 5

    def test_recent_limit(self):
        recorder = StageEventRecorder()
        for stage in range(4):
            recorder.record(StageEventType.NO_TRANSITION, "legacy_1", current_stage=stage)

        recent = recorder.recent(2)

        assert [event.detail["current_stage"] for event in recent] == [2, 3]
        assert recorder.recent(0) == []

    def test_events_for_lead(self):
        recorder = StageEventRecorder()
        recorder.record(StageEventType.NO_TRANSITION, LeadRef.legacy(1))
        recorder.record(StageEventType.STAGE_UPDATED, LeadRef.legacy(2))

        events = recorder.events_for(LeadRef.legacy(2))

        assert len(events) == 1
        assert events[0].event_type == StageEventType.STAGE_UPDATED

    def test_event_without_lead(self):
        recorder = StageEventRecorder()
        event = recorder.record(StageEventType.MISSING_IDENTIFIER, trigger="email")
        assert event.lead is None
        assert event.to_dict()["event_type"] == "missing_identifier"

    def test_logs_with_structured_fields(self, caplog):
        recorder = StageEventRecorder()

        with caplog.at_level(logging.ERROR):
            recorder.record(StageEventType.STAGE_UPDATE_FAILED, "legacy_9", error="denied")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.stage_event == "stage_update_failed"
        assert record.lead == "legacy_9"

    def test_reset(self):
        recorder = StageEventRecorder()
        recorder.record(StageEventType.NO_TRANSITION, "legacy_1")
        recorder.reset()
        assert recorder.recent() == []
        assert recorder.count(StageEventType.NO_TRANSITION) == 0


class TestGlobalRecorder:
    """Tests for get_stage_event_recorder"""

    def test_returns_same_instance(self):
        assert get_stage_event_recorder() is get_stage_event_recorder()
