"""
Unit tests for the report and challenge status machines.
"""
from datetime import date

import pytest

from lecture_reporting.errors import ErrorCode, ValidationError
from lecture_reporting.orm import ChallengeStatus, ReportStatus
from lecture_reporting.state_machines.workflow_status import (
    ChallengeStatusMachine,
    ReportStatusMachine,
    StudentChallengeStatusMachine,
)


class TestReportStatusMachine:

    def test_feedback_moves_submitted_to_reviewed(self):
        assert ReportStatusMachine.on_feedback(ReportStatus.submitted) == ReportStatus.reviewed

    def test_feedback_on_reviewed_stays_reviewed(self):
        assert ReportStatusMachine.on_feedback(ReportStatus.reviewed) == ReportStatus.reviewed

    def test_no_path_back_to_submitted(self):
        assert not ReportStatusMachine.can_transition(ReportStatus.reviewed, ReportStatus.submitted)
        with pytest.raises(ValidationError) as exc:
            ReportStatusMachine.transition(ReportStatus.reviewed, ReportStatus.submitted)
        assert exc.value.code == ErrorCode.INVALID_TRANSITION


class TestChallengeStatusMachines:

    @pytest.mark.parametrize("machine", [ChallengeStatusMachine, StudentChallengeStatusMachine])
    def test_every_status_reachable_from_every_status(self, machine):
        for current in ChallengeStatus:
            for target in ChallengeStatus:
                assert machine.transition(current, target) == target

    def test_parse_accepts_raw_values(self):
        assert ChallengeStatusMachine.parse("in_progress") == ChallengeStatus.in_progress

    def test_parse_rejects_unknown_status(self):
        with pytest.raises(ValidationError) as exc:
            ChallengeStatusMachine.parse("closed")
        assert exc.value.code == ErrorCode.INVALID_CHOICE
        assert exc.value.field == "status"

    def test_resolved_date_only_when_resolved(self):
        today = date(2024, 5, 1)
        assert ChallengeStatusMachine.resolved_date_for(ChallengeStatus.resolved, today) == today
        assert ChallengeStatusMachine.resolved_date_for(ChallengeStatus.pending, today) is None
        assert ChallengeStatusMachine.resolved_date_for(ChallengeStatus.in_progress, today) is None
