"""
Unit Tests for Stage Transition Rules
"""
import itertools

import pytest

from leadstage.domain.models.interaction import InteractionSummary
from leadstage.domain.services.transition_rules import (
    decide_target_stage,
    should_precommunicate,
    should_start_communication,
)

ALL_SUMMARIES = [
    InteractionSummary(
        has_outbound=outbound,
        has_inbound=inbound,
        has_call_over_2_min=long_call,
        has_any_interaction=any_interaction,
    )
    for outbound, inbound, long_call, any_interaction in itertools.product([False, True], repeat=4)
]

STAGES = [None, 0, 5, 10, 11, 12, 15, 20, 100]


class TestGuards:
    """Stage and interaction guards hold for every summary"""

    @pytest.mark.parametrize("stage", STAGES)
    def test_no_interactions_never_transitions(self, stage):
        for summary in ALL_SUMMARIES:
            if summary.has_any_interaction:
                continue
            assert not should_precommunicate(summary, stage)
            assert not should_start_communication(summary, stage)

    @pytest.mark.parametrize("stage", [None, 5, 11, 12, 15, 20])
    def test_precommunication_only_from_0_or_10(self, stage):
        for summary in ALL_SUMMARIES:
            assert not should_precommunicate(summary, stage)

    @pytest.mark.parametrize("stage", [None, 5, 12, 15, 20])
    def test_communication_started_only_from_0_10_11(self, stage):
        for summary in ALL_SUMMARIES:
            assert not should_start_communication(summary, stage)


class TestShouldPrecommunicate:
    """Tests for the Precommunication (11) predicate"""

    @pytest.mark.parametrize("stage", [0, 10])
    def test_outbound_only(self, stage):
        summary = InteractionSummary(has_outbound=True, has_any_interaction=True)
        assert should_precommunicate(summary, stage)

    def test_inbound_only(self):
        summary = InteractionSummary(has_inbound=True, has_any_interaction=True)
        assert should_precommunicate(summary, 10)

    def test_both_directions_blocks(self):
        summary = InteractionSummary(has_outbound=True, has_inbound=True, has_any_interaction=True)
        assert not should_precommunicate(summary, 10)

    def test_long_call_blocks(self):
        summary = InteractionSummary(
            has_outbound=True, has_call_over_2_min=True, has_any_interaction=True
        )
        assert not should_precommunicate(summary, 0)

    def test_interaction_without_direction_blocks(self):
        """Rows with unknown direction alone do not qualify"""
        summary = InteractionSummary(has_any_interaction=True)
        assert not should_precommunicate(summary, 0)

    def test_short_inbound_call_qualifies(self):
        """A single inbound call under 2 minutes still counts as one-way contact"""
        summary = InteractionSummary(has_inbound=True, has_any_interaction=True)
        assert should_precommunicate(summary, 0)


class TestShouldStartCommunication:
    """Tests for the Communication Started (15) predicate"""

    @pytest.mark.parametrize("stage", [0, 10, 11])
    def test_both_directions_with_long_call(self, stage):
        summary = InteractionSummary(
            has_outbound=True, has_inbound=True, has_call_over_2_min=True, has_any_interaction=True
        )
        assert should_start_communication(summary, stage)

    def test_requires_long_call(self):
        summary = InteractionSummary(has_outbound=True, has_inbound=True, has_any_interaction=True)
        assert not should_start_communication(summary, 11)

    def test_requires_inbound(self):
        summary = InteractionSummary(
            has_outbound=True, has_call_over_2_min=True, has_any_interaction=True
        )
        assert not should_start_communication(summary, 0)


class TestDecideTargetStage:
    """Tests for priority between the two transitions"""

    def test_communication_started_preferred(self):
        summary = InteractionSummary(
            has_outbound=True, has_inbound=True, has_call_over_2_min=True, has_any_interaction=True
        )
        assert decide_target_stage(summary, 10) == 15

    def test_precommunication(self):
        summary = InteractionSummary(has_outbound=True, has_any_interaction=True)
        assert decide_target_stage(summary, 10) == 11

    def test_none_when_nothing_applies(self):
        summary = InteractionSummary(has_outbound=True, has_any_interaction=True)
        assert decide_target_stage(summary, 11) is None

    @pytest.mark.parametrize("stage", [11, 15, 20])
    def test_never_moves_backward(self, stage):
        for summary in ALL_SUMMARIES:
            target = decide_target_stage(summary, stage)
            assert target is None or target > stage

    def test_never_downgrades_from_15(self):
        """Once at 15, no summary yields 11"""
        for summary in ALL_SUMMARIES:
            assert decide_target_stage(summary, 15) is None
