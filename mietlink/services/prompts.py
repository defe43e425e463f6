import json
from typing import Any, Dict, List

LANG_MAP = {"de": "German", "fr": "French", "it": "Italian", "en": "English", "es": "Spanish"}


def language_name(language: str) -> str:
    return LANG_MAP.get((language or "de").lower(), "German")


CLASSIFY_DOCUMENT = (
    "You are a Swiss document validation expert. Classify and validate documents for rental "
    "applications. Return JSON: {\"valid\": boolean, \"confidence\": number (0-1), "
    "\"doc_type\": \"id|permit|debt_extract|income|lease\", \"reason\": \"explanation\"}. "
    "Be strict with Swiss document standards."
)

PARSE_CONTRACT = (
    "You are a Swiss rental contract expert. Extract key information from rental contracts and "
    "return JSON in this exact format: {\"rent_chf\": number, \"notice_months\": number, "
    "\"key_count\": number, \"obligations\": [string array of tenant obligations]}. "
    "Use Swiss rental law defaults if information is missing."
)

GENERATE_TASKS = (
    "Convert tenant obligations into actionable move-out tasks with due dates. Return JSON: "
    "{\"tasks\": [{\"title\": \"task description\", \"days_before_exit\": number}]}. "
    "Use Swiss rental standards for timing."
)


def build_classify_prompt(filename: str, type_hint: str) -> str:
    return (
        f"{CLASSIFY_DOCUMENT}\n\n"
        f"Analyze this document. Filename: {filename or 'unknown'}. "
        f"The applicant declared it as: {type_hint}."
    )


def build_contract_prompt(text: str) -> str:
    return f"{PARSE_CONTRACT}\n\nContract:\n{text}"


def build_tasks_prompt(obligations: List[str]) -> str:
    return f"{GENERATE_TASKS}\n\nObligations: {', '.join(obligations)}"


def build_cover_letter_prompt(user_info: Dict[str, Any], property_info: Dict[str, Any], language: str) -> str:
    return (
        f"Write a professional, personal cover letter for a Swiss rental application in "
        f"{language_name(language)}. Maximum 150 words. Sound human. Avoid cliches. "
        f"Return JSON: {{\"text\": \"cover letter\"}}.\n\n"
        f"Applicant: {json.dumps(user_info, default=str)}\n"
        f"Property: {json.dumps(property_info, default=str)}"
    )


def build_explain_score_prompt(candidate_data: Dict[str, Any]) -> str:
    return (
        "Explain in one sentence why this rental candidate received their score. Be specific "
        "about document completeness and which documents are missing or invalid. "
        "Return JSON: {\"reason\": \"explanation\"}.\n\n"
        f"Candidate: {json.dumps(candidate_data, default=str)}"
    )


def build_regie_email_prompt(candidates: List[Dict[str, Any]], language: str) -> str:
    return (
        f"Write a professional email to a Swiss regie (property management agency) in "
        f"{language_name(language)} presenting the top {len(candidates)} candidates. Include a "
        f"table with their scores and key info. Return JSON: {{\"subject\": \"email subject\", "
        f"\"body\": \"email body\"}}.\n\n"
        f"Candidates: {json.dumps(candidates, default=str)}"
    )
