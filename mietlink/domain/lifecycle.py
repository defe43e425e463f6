"""Candidate lifecycle rules.

    dossier_submitted -> under_review -> accepted | rejected

accepted and rejected are terminal and are only reached through a landlord
decision. The badge flag is an overlay and never takes part in transitions.
"""
from typing import List, Optional, Union

from mietlink.core.errors import AlreadyDecided, PropertyClosed, ValidationError
from mietlink.domain.enums import CandidateStatus, LandlordDecision

INITIAL_STATUS = CandidateStatus.dossier_submitted

TRANSITIONS = {
    CandidateStatus.dossier_submitted: {
        CandidateStatus.under_review,
        CandidateStatus.accepted,
        CandidateStatus.rejected,
    },
    CandidateStatus.under_review: {CandidateStatus.accepted, CandidateStatus.rejected},
    CandidateStatus.accepted: set(),
    CandidateStatus.rejected: set(),
}

TERMINAL = frozenset(s for s, targets in TRANSITIONS.items() if not targets)


def can_transition(current: Union[str, CandidateStatus], target: Union[str, CandidateStatus]) -> bool:
    return CandidateStatus(target) in TRANSITIONS[CandidateStatus(current)]


def sources_of(target: Union[str, CandidateStatus]) -> List[str]:
    """Every status a candidate may move to ``target`` from."""
    return sorted(s.value for s, targets in TRANSITIONS.items() if CandidateStatus(target) in targets)


def check_transition(current: Union[str, CandidateStatus], target: Union[str, CandidateStatus]) -> None:
    if can_transition(current, target):
        return
    if CandidateStatus(current) in TERMINAL:
        raise AlreadyDecided(f"Candidate is already {CandidateStatus(current).value}")
    raise ValidationError(f"Candidate cannot move from {CandidateStatus(current).value} to {CandidateStatus(target).value}")


def parse_decision(value: Union[str, LandlordDecision, None]) -> LandlordDecision:
    try:
        return LandlordDecision((value or "").strip().lower() if isinstance(value, str) else value)
    except ValueError:
        raise ValidationError(f"Decision must be one of: {', '.join(d.value for d in LandlordDecision)}")


def status_for_decision(decision: LandlordDecision) -> CandidateStatus:
    return CandidateStatus(decision.value)


def check_decision(current: Optional[str], requested: LandlordDecision) -> bool:
    """Return True when ``requested`` must be written, False for an idempotent repeat.

    Raises AlreadyDecided when a different decision is already recorded.
    """
    if current is None:
        return True
    if LandlordDecision(current) == requested:
        return False
    raise AlreadyDecided(f"Candidate was already {current}; decisions cannot be reversed")


def check_accepting_applications(closed_at) -> None:
    if closed_at is not None:
        raise PropertyClosed("This property is no longer accepting applications")
