"""Tenant score computation.

Pure functions over document records: nothing here touches the database or
the web layer, so the same rules apply whether the score is computed on
upload, on candidate creation or on an explicit recompute.

Downstream consumers (landlord filters, badges) rely on the score thresholds
(>= 80 green, >= 60 yellow), not on the literal canonical scores, so any
policy must keep its canonical scores on the right side of them.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Optional

from mietlink.domain.enums import DocumentType, StatusTier, parse_document_type

DEFAULT_REQUIRED_TYPES = frozenset(
    {DocumentType.identity, DocumentType.debt_extract, DocumentType.income_proof}
)

REASON_COMPLETE = "all required documents valid"
REASON_PARTIAL = "some documents missing"
REASON_INCOMPLETE = "key documents missing"
REASON_NO_REQUIREMENTS = "no required documents configured"


@dataclass(frozen=True)
class ScoringPolicy:
    required_types: FrozenSet[DocumentType] = DEFAULT_REQUIRED_TYPES
    green_threshold: int = 80
    yellow_threshold: int = 60
    complete_score: int = 85
    partial_score: int = 60
    incomplete_score: int = 25
    no_requirements_score: int = 100

    def __post_init__(self):
        if not 0 <= self.yellow_threshold <= self.green_threshold <= 100:
            raise ValueError("Score thresholds must satisfy 0 <= yellow <= green <= 100")
        if not self.complete_score >= self.green_threshold:
            raise ValueError("Complete score must reach the green threshold")
        if not self.yellow_threshold <= self.partial_score < self.green_threshold:
            raise ValueError("Partial score must fall inside the yellow band")
        if not 0 <= self.incomplete_score < self.yellow_threshold:
            raise ValueError("Incomplete score must stay below the yellow threshold")
        if not self.no_requirements_score >= self.green_threshold:
            raise ValueError("No-requirements score must reach the green threshold")

    @classmethod
    def from_settings(cls, settings) -> "ScoringPolicy":
        return cls(
            required_types=frozenset(parse_document_type(t) for t in settings.required_document_types),
            green_threshold=settings.SCORE_GREEN_THRESHOLD,
            yellow_threshold=settings.SCORE_YELLOW_THRESHOLD,
            complete_score=settings.SCORE_COMPLETE,
            partial_score=settings.SCORE_PARTIAL,
            incomplete_score=settings.SCORE_INCOMPLETE,
            no_requirements_score=settings.SCORE_NO_REQUIREMENTS,
        )


@dataclass(frozen=True)
class ScoreResult:
    score: int
    status: StatusTier
    reason: str
    valid_required: int = 0
    required_total: int = 0
    missing: tuple = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "status": self.status.value,
            "reason": self.reason,
            "valid_required": self.valid_required,
            "required_total": self.required_total,
            "missing": [t.value for t in self.missing],
        }


def tier_for_score(score: int, policy: ScoringPolicy = ScoringPolicy()) -> StatusTier:
    """Display tier derived purely from the score thresholds."""
    if score >= policy.green_threshold:
        return StatusTier.green
    if score >= policy.yellow_threshold:
        return StatusTier.yellow
    return StatusTier.incomplete


def compute_score(valid_required: int, required_total: int, policy: ScoringPolicy = ScoringPolicy()) -> ScoreResult:
    if required_total <= 0:
        return ScoreResult(policy.no_requirements_score, StatusTier.green, REASON_NO_REQUIREMENTS, 0, 0)
    if valid_required < 0 or valid_required > required_total:
        raise ValueError("valid_required must be between 0 and required_total")

    if valid_required == required_total:
        score, reason = policy.complete_score, REASON_COMPLETE
    elif valid_required > required_total / 2:
        score, reason = policy.partial_score, REASON_PARTIAL
    else:
        score, reason = policy.incomplete_score, REASON_INCOMPLETE
    return ScoreResult(score, tier_for_score(score, policy), reason, valid_required, required_total)


def _created_key(doc) -> datetime:
    ts = getattr(doc, "created_at", None)
    if ts is None:
        return datetime.min
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def _doc_type(doc) -> Optional[DocumentType]:
    value = getattr(doc, "type", None)
    if isinstance(value, DocumentType):
        return value
    try:
        return DocumentType(value)
    except ValueError:
        return None


def current_documents(documents: Iterable) -> Dict[DocumentType, Any]:
    """Pick the representative document per type.

    The most recently created valid upload wins; a type with no valid upload
    is represented by its most recent one so callers can still show why it
    was rejected. Documents arrive newest first; among equal timestamps the
    earlier position counts as the later upload.
    """
    best: Dict[DocumentType, Any] = {}
    ordered = sorted(enumerate(documents), key=lambda pair: (_created_key(pair[1]), -pair[0]))
    for _, doc in ordered:
        doc_type = _doc_type(doc)
        if doc_type is None:
            continue
        current = best.get(doc_type)
        if current is None or doc.is_valid or not current.is_valid:
            best[doc_type] = doc
    return best


def score_documents(documents: Iterable, policy: ScoringPolicy = ScoringPolicy()) -> ScoreResult:
    """Score a candidate's document set against the required-type policy."""
    current = current_documents(documents)
    required = sorted(policy.required_types, key=lambda t: t.value)
    valid = [t for t in required if t in current and current[t].is_valid]
    missing = tuple(t for t in required if t not in valid)
    result = compute_score(len(valid), len(required), policy)
    return ScoreResult(
        result.score,
        result.status,
        result.reason,
        result.valid_required,
        result.required_total,
        missing,
    )
