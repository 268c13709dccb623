"""Unit tests for live class state machine"""

from datetime import datetime

import pytest

from src.domain.live_class import LiveClassSession, SessionStatus


def _session(status: SessionStatus) -> LiveClassSession:
    return LiveClassSession(
        title="Conversation practice",
        instructor_id="instructor_1",
        start_time=datetime(2024, 5, 1, 10, 0),
        end_time=datetime(2024, 5, 1, 11, 0),
        status=status,
    )


class TestStatusTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (SessionStatus.SCHEDULED, SessionStatus.ACTIVE),
            (SessionStatus.SCHEDULED, SessionStatus.CANCELLED),
            (SessionStatus.ACTIVE, SessionStatus.COMPLETED),
            (SessionStatus.ACTIVE, SessionStatus.CANCELLED),
        ],
    )
    def test_allowed_transitions(self, current, target):
        assert _session(current).can_transition_to(target) is True

    @pytest.mark.parametrize(
        "current,target",
        [
            (SessionStatus.SCHEDULED, SessionStatus.COMPLETED),
            (SessionStatus.ACTIVE, SessionStatus.SCHEDULED),
            (SessionStatus.COMPLETED, SessionStatus.ACTIVE),
            (SessionStatus.CANCELLED, SessionStatus.SCHEDULED),
            (SessionStatus.CANCELLED, SessionStatus.ACTIVE),
        ],
    )
    def test_rejected_transitions(self, current, target):
        assert _session(current).can_transition_to(target) is False
