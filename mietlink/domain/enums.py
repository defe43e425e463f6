import enum
from typing import Optional

from mietlink.core.errors import ValidationError


class DocumentType(str, enum.Enum):
    identity = "id"
    residence_permit = "permit"
    debt_extract = "debt_extract"
    income_proof = "income"
    lease = "lease"


# Spellings seen from the upload form, older clients and the classifier
_DOCUMENT_TYPE_ALIASES = {
    "identity": DocumentType.identity,
    "id_card": DocumentType.identity,
    "passport": DocumentType.identity,
    "residence_permit": DocumentType.residence_permit,
    "residence-permit": DocumentType.residence_permit,
    "debt-extract": DocumentType.debt_extract,
    "betreibungsauszug": DocumentType.debt_extract,
    "income_proof": DocumentType.income_proof,
    "income-proof": DocumentType.income_proof,
    "salary": DocumentType.income_proof,
    "contract": DocumentType.lease,
}


def parse_document_type(value: Optional[str]) -> DocumentType:
    """Normalize a free-form document type into the closed enumeration.

    Raises ValidationError for anything that is not a known type or alias.
    """
    key = (value or "").strip().lower()
    if not key:
        raise ValidationError("Document type is required")
    try:
        return DocumentType(key)
    except ValueError:
        pass
    if key in _DOCUMENT_TYPE_ALIASES:
        return _DOCUMENT_TYPE_ALIASES[key]
    raise ValidationError(f"Unknown document type: {value}")


class StatusTier(str, enum.Enum):
    green = "green"
    yellow = "yellow"
    incomplete = "incomplete"


class CandidateStatus(str, enum.Enum):
    dossier_submitted = "dossier_submitted"
    under_review = "under_review"
    accepted = "accepted"
    rejected = "rejected"


class LandlordDecision(str, enum.Enum):
    accepted = "accepted"
    rejected = "rejected"


class TaskStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"


class UserRole(str, enum.Enum):
    tenant = "tenant"
    landlord = "landlord"
    regie = "regie"


class Language(str, enum.Enum):
    de = "de"
    fr = "fr"
    it = "it"
    en = "en"
    es = "es"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
