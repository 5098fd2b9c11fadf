"""
Workflow status machines for reports and challenges.

State flows:
- Lecture report:      submitted → reviewed (feedback only; reviewed → reviewed
                       re-applies feedback, there is no way back to submitted)
- Lecturer challenge:  pending ⇄ in_progress ⇄ resolved (freely settable)
- Student challenge:   pending ⇄ in_progress ⇄ resolved (freely settable)

Side effects that belong to a transition (resolved_date) live here so the
services apply them in one place.
"""
from datetime import date
from enum import Enum
from typing import Dict, FrozenSet, Optional, Type

from lecture_reporting.errors import ErrorCode, ValidationError
from lecture_reporting.orm.challenge import ChallengeStatus
from lecture_reporting.orm.report import ReportStatus


class StatusMachine:
    """
    Table-driven status machine.

    TRANSITIONS maps each state to the set of states reachable from it.
    """

    STATES: Type[Enum]
    TRANSITIONS: Dict[Enum, FrozenSet[Enum]] = {}

    @classmethod
    def parse(cls, value, field: str = "status") -> Enum:
        """Coerce a raw value into a state, raising ValidationError if unknown."""
        try:
            return cls.STATES(getattr(value, "value", value))
        except ValueError:
            allowed = ", ".join(s.value for s in cls.STATES)
            raise ValidationError(
                field,
                message=f"Invalid {field}. Must be one of: {allowed}",
                code=ErrorCode.INVALID_CHOICE,
            )

    @classmethod
    def can_transition(cls, current: Enum, target: Enum) -> bool:
        return target in cls.TRANSITIONS.get(current, frozenset())

    @classmethod
    def transition(cls, current: Enum, target: Enum) -> Enum:
        if not cls.can_transition(current, target):
            raise ValidationError(
                "status",
                message=f"Invalid transition: {current.value} → {target.value}",
                code=ErrorCode.INVALID_TRANSITION,
            )
        return target


class ReportStatusMachine(StatusMachine):
    STATES = ReportStatus
    TRANSITIONS = {
        ReportStatus.submitted: frozenset({ReportStatus.reviewed}),
        ReportStatus.reviewed: frozenset({ReportStatus.reviewed}),
    }

    @classmethod
    def on_feedback(cls, current: ReportStatus) -> ReportStatus:
        return cls.transition(current, ReportStatus.reviewed)


_ALL_CHALLENGE_STATES = frozenset(ChallengeStatus)


class ChallengeStatusMachine(StatusMachine):
    STATES = ChallengeStatus
    TRANSITIONS = {state: _ALL_CHALLENGE_STATES for state in ChallengeStatus}

    @staticmethod
    def resolved_date_for(status: ChallengeStatus, today: Optional[date] = None) -> Optional[date]:
        """resolved_date is stamped exactly when the status is resolved and cleared otherwise."""
        if status == ChallengeStatus.resolved:
            return today or date.today()
        return None


class StudentChallengeStatusMachine(StatusMachine):
    STATES = ChallengeStatus
    TRANSITIONS = {state: _ALL_CHALLENGE_STATES for state in ChallengeStatus}
