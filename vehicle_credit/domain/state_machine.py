"""Review lifecycle of a credit application"""

from enum import Enum
from typing import Dict, Tuple
from vehicle_credit.domain.exceptions import IllegalTransitionError
from vehicle_credit.domain.models import ApplicationStatus


class Action(str, Enum):
    REVIEW = "review"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"

    @property
    def is_review_decision(self) -> bool:
        """Actions reserved to reviewers"""
        return self in (Action.REVIEW, Action.APPROVE, Action.REJECT)


S = ApplicationStatus

TRANSITIONS: Dict[Tuple[ApplicationStatus, Action], ApplicationStatus] = {
    (S.PENDING, Action.REVIEW): S.UNDER_REVIEW,
    (S.PENDING, Action.APPROVE): S.APPROVED,
    (S.UNDER_REVIEW, Action.APPROVE): S.APPROVED,
    (S.PENDING, Action.REJECT): S.REJECTED,
    (S.UNDER_REVIEW, Action.REJECT): S.REJECTED,
    (S.PENDING, Action.CANCEL): S.CANCELLED,
}


def next_status(current: ApplicationStatus, action: Action) -> ApplicationStatus:
    """
    Resolve the status an action leads to.

    Terminal statuses (approved, rejected, cancelled) have no outgoing edges.

    Raises:
        IllegalTransitionError: action not permitted from current status
    """
    target = TRANSITIONS.get((current, action))
    if target is None:
        raise IllegalTransitionError(f"Cannot {action.value} an application that is {current.value}")
    return target


def allowed_actions(current: ApplicationStatus) -> list[Action]:
    return [action for (status, action) in TRANSITIONS if status == current]
