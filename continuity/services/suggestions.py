from __future__ import annotations

import json
from typing import Any, Mapping

import httpx
from pydantic import ValidationError

from continuity.core.config import get_settings
from continuity.core.logging import log_error, log_info, log_warning
from continuity.schemas.bia import RecoveryPointObjective, RecoveryTimeObjective
from continuity.schemas.suggestions import AIAnalysisResult, SuggestionRequest


class SuggestionFailedError(RuntimeError):
    """Raised when the text generation service could not produce a suggestion."""


_PROMPT_TEMPLATE = """
You are an expert Business Continuity Consultant certified in ISO 22301.
Analyze the business activity "{activity_name}" for the department "{department}".

Provide a structured assessment including:
1. A professional description of the activity.
2. A recommended Recovery Time Objective (RTO) and Recovery Point Objective (RPO) based on industry standards for this type of activity.
3. A brief narrative describing the potential impact if this activity is disrupted for 24 hours.
4. A list of 3-5 typical resources (IT systems, people, facilities) required to perform this activity.
"""


def _response_schema() -> dict[str, Any]:
    return {
        "type": "OBJECT",
        "properties": {
            "suggestedDescription": {"type": "STRING"},
            "suggestedRTO": {
                "type": "STRING",
                "enum": [member.value for member in RecoveryTimeObjective],
            },
            "suggestedRPO": {
                "type": "STRING",
                "enum": [member.value for member in RecoveryPointObjective],
            },
            "impactNarrative": {"type": "STRING"},
            "suggestedResources": {"type": "ARRAY", "items": {"type": "STRING"}},
        },
        "required": [
            "suggestedDescription",
            "suggestedRTO",
            "suggestedRPO",
            "impactNarrative",
            "suggestedResources",
        ],
    }


def build_request_body(request: SuggestionRequest) -> dict[str, Any]:
    prompt = _PROMPT_TEMPLATE.format(
        activity_name=request.activity_name,
        department=request.department,
    )
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": _response_schema(),
        },
    }


def _extract_text(payload: Any) -> str | None:
    """Join the text parts of the first candidate that has any.

    Returns ``None`` when the body does not have the expected
    ``candidates[].content.parts[].text`` shape.
    """
    if not isinstance(payload, Mapping):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list):
        return None
    for candidate in candidates:
        content = candidate.get("content") if isinstance(candidate, Mapping) else None
        parts = content.get("parts") if isinstance(content, Mapping) else None
        if not isinstance(parts, list):
            continue
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, Mapping) and isinstance(part.get("text"), str) and part["text"]
        ]
        if texts:
            return "".join(texts)
    return None


async def generate_bia_analysis(
    activity_name: str,
    department: str,
) -> AIAnalysisResult | None:
    """Ask the text generation service for a draft analysis of an activity.

    Returns ``None`` without calling out when no API key is configured.
    Transport errors, error statuses and empty or unparsable answers raise
    :class:`SuggestionFailedError`. Nothing is written to the store here;
    applying the suggestion is left to the caller.
    """
    request = SuggestionRequest(activity_name=activity_name, department=department)
    settings = get_settings()
    if not settings.gemini_api_key:
        log_warning("No API key configured for activity suggestions")
        return None

    base_url = settings.gemini_base_url.rstrip("/")
    endpoint = f"{base_url}/models/{settings.gemini_model}:generateContent"
    headers = {
        "Content-Type": "application/json",
        "x-goog-api-key": settings.gemini_api_key,
    }
    timeout = httpx.Timeout(settings.ai_request_timeout, connect=5.0)

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(endpoint, json=build_request_body(request), headers=headers)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code if exc.response is not None else None
        log_error("Activity suggestion request rejected", status=status_code, model=settings.gemini_model)
        raise SuggestionFailedError(f"Suggestion service returned HTTP {status_code}") from exc
    except httpx.HTTPError as exc:
        log_error("Activity suggestion request failed", error=str(exc), model=settings.gemini_model)
        raise SuggestionFailedError(f"Suggestion service unreachable: {exc}") from exc
    except ValueError as exc:
        log_error("Activity suggestion response was not JSON", error=str(exc))
        raise SuggestionFailedError("Suggestion service returned an invalid response") from exc

    text = _extract_text(payload)
    if not text:
        log_error("Activity suggestion response contained no text", model=settings.gemini_model)
        raise SuggestionFailedError("Suggestion service returned no analysis")

    try:
        result = AIAnalysisResult.model_validate(json.loads(text))
    except (ValueError, ValidationError) as exc:
        log_error("Activity suggestion could not be parsed", error=str(exc))
        raise SuggestionFailedError("Suggestion service returned a malformed analysis") from exc

    log_info(
        "Generated activity suggestion",
        activity=request.activity_name,
        department=request.department,
        resources=len(result.suggested_resources),
    )
    return result
