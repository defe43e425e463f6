from dataclasses import dataclass
from typing import Any, Mapping, Optional

UNAVAILABLE_REASON = "validation unavailable"
ACCEPTED_REASON = "Document accepted"
# Confidence recorded for files the classifier is not asked about (PDFs, scans sent as text)
UNCHECKED_CONFIDENCE = 0.95


def clamp_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    if confidence != confidence:  # NaN
        return 0.0
    return max(0.0, min(1.0, confidence))


@dataclass(frozen=True)
class ValidationOutcome:
    valid: bool
    confidence: float
    reason: str
    detected_type: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    @classmethod
    def unavailable(cls) -> "ValidationOutcome":
        return cls(valid=False, confidence=0.0, reason=UNAVAILABLE_REASON)

    @classmethod
    def unchecked(cls) -> "ValidationOutcome":
        return cls(valid=True, confidence=UNCHECKED_CONFIDENCE, reason=ACCEPTED_REASON)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ValidationOutcome":
        """Build an outcome from the classifier's JSON answer, tolerating missing keys."""
        return cls(
            valid=payload.get("valid") is True,
            confidence=payload.get("confidence", 0.0),
            reason=str(payload.get("reason") or "Unable to classify document"),
            detected_type=payload.get("doc_type") or payload.get("type"),
        )
