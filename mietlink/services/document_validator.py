from typing import Optional

from pybreaker import CircuitBreakerError
from structlog import get_logger

from mietlink.config import settings
from mietlink.core.errors import ExternalServiceFailure
from mietlink.domain.enums import DocumentType
from mietlink.domain.validation import ValidationOutcome
from mietlink.services import gemini

logger = get_logger()


def needs_classification(mime_type: Optional[str]) -> bool:
    return (mime_type or "").lower().startswith("image/")


async def validate_upload(
    data: bytes,
    mime_type: Optional[str],
    filename: str,
    declared_type: DocumentType,
    failure_mode: Optional[str] = None,
) -> ValidationOutcome:
    """Run the external classifier on an uploaded file.

    Only images are classified; anything else is accepted unchecked. When the
    classifier is unavailable the outcome depends on ``failure_mode``:
    "open" records the document as invalid, "closed" rejects the upload.
    """
    if not needs_classification(mime_type):
        return ValidationOutcome.unchecked()

    mode = failure_mode or settings.VALIDATION_FAILURE_MODE
    try:
        payload = await gemini.classify_document(data, mime_type, filename, declared_type.value)
    except (ExternalServiceFailure, CircuitBreakerError) as e:
        if mode == "closed":
            raise ExternalServiceFailure("Document validation is unavailable, please retry later", service="document-validator")
        logger.warning("Document validation unavailable, recording as invalid", filename=filename, error=str(e))
        return ValidationOutcome.unavailable()

    outcome = ValidationOutcome.from_payload(payload)
    if outcome.detected_type and outcome.detected_type != declared_type.value:
        logger.info(
            "Classifier type differs from declared type",
            filename=filename,
            declared=declared_type.value,
            detected=outcome.detected_type,
        )
    return outcome
