"""Gemini client for every text-generation / classification call the service makes.

All functions raise ExternalServiceFailure on timeouts, transport errors or
unparseable answers; callers decide whether a failure is fatal.
"""
import asyncio
import json
from typing import Any, Dict, List

import google.generativeai as genai
from pybreaker import CircuitBreaker
from structlog import get_logger

from mietlink.config import settings
from mietlink.core.errors import ExternalServiceFailure
from mietlink.services import prompts
from mietlink.utils.retry import retry_api

logger = get_logger()
breaker = CircuitBreaker(fail_max=3, reset_timeout=60)

genai.configure(api_key=settings.GEMINI_API_KEY)

JSON_OUTPUT = {"response_mime_type": "application/json"}


async def _generate_json(parts: List[Any], purpose: str) -> Any:
    with breaker.calling():
        model = genai.GenerativeModel(settings.GEMINI_MODEL)
        try:
            response = await asyncio.wait_for(
                model.generate_content_async(parts, generation_config=JSON_OUTPUT),
                timeout=settings.EXTERNAL_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.warning("Gemini call timed out", purpose=purpose, timeout=settings.EXTERNAL_TIMEOUT_SECONDS)
            raise ExternalServiceFailure(f"{purpose} timed out")
        except Exception as e:
            logger.error("Gemini API failed", purpose=purpose, model=settings.GEMINI_MODEL, error=str(e))
            raise ExternalServiceFailure(f"{purpose} failed: {e}")
        try:
            return json.loads(response.text or "{}")
        except (ValueError, AttributeError) as e:
            logger.error("Gemini returned unparseable JSON", purpose=purpose, error=str(e))
            raise ExternalServiceFailure(f"{purpose} returned an invalid answer")


async def classify_document(data: bytes, mime_type: str, filename: str, type_hint: str) -> Dict[str, Any]:
    prompt = prompts.build_classify_prompt(filename, type_hint)
    result = await _generate_json([prompt, {"mime_type": mime_type, "data": data}], "document classification")
    if not isinstance(result, dict):
        raise ExternalServiceFailure("document classification returned an invalid answer")
    return result


@retry_api(tries=settings.EXTERNAL_RETRIES, delay=1, backoff=2)
async def parse_contract(text: str) -> Dict[str, Any]:
    result = await _generate_json([prompts.build_contract_prompt(text)], "contract parsing")
    if not isinstance(result, dict):
        result = {}
    obligations = result.get("obligations") or []
    return {
        "rent_chf": result.get("rent_chf") or 0,
        "notice_months": result.get("notice_months") or 3,
        "key_count": result.get("key_count") or 1,
        "obligations": [str(o) for o in obligations if str(o).strip()] if isinstance(obligations, list) else [],
    }


@retry_api(tries=settings.EXTERNAL_RETRIES, delay=1, backoff=2)
async def generate_tasks(obligations: List[str]) -> List[Any]:
    """Obligations (free text) -> [{"title", "days_before_exit"}]. Items are not validated here."""
    result = await _generate_json([prompts.build_tasks_prompt(obligations)], "task generation")
    if isinstance(result, list):
        return result
    if isinstance(result, dict) and isinstance(result.get("tasks"), list):
        return result["tasks"]
    raise ExternalServiceFailure("task generation returned an invalid answer")


@retry_api(tries=settings.EXTERNAL_RETRIES, delay=1, backoff=2)
async def generate_cover_letter(user_info: Dict[str, Any], property_info: Dict[str, Any], language: str = "de") -> str:
    result = await _generate_json(
        [prompts.build_cover_letter_prompt(user_info, property_info, language)], "cover letter"
    )
    text = result.get("text") if isinstance(result, dict) else None
    if not text:
        raise ExternalServiceFailure("cover letter generation returned no text")
    return text


async def explain_score(candidate_data: Dict[str, Any]) -> str:
    result = await _generate_json([prompts.build_explain_score_prompt(candidate_data)], "score explanation")
    reason = result.get("reason") if isinstance(result, dict) else None
    if not reason:
        raise ExternalServiceFailure("score explanation returned no text")
    return reason


@retry_api(tries=settings.EXTERNAL_RETRIES, delay=1, backoff=2)
async def generate_regie_email(candidates: List[Dict[str, Any]], language: str = "de") -> Dict[str, str]:
    result = await _generate_json([prompts.build_regie_email_prompt(candidates, language)], "regie email")
    if not isinstance(result, dict):
        result = {}
    return {
        "subject": result.get("subject") or "Top 3 Kandidaten für Ihre Wohnung",
        "body": result.get("body") or "Anbei finden Sie die drei besten Kandidaten.",
    }
