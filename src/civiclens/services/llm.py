"""Complaint classification: Gemini (OpenAI-compatible API) with a local keyword fallback."""

import hashlib
import json
import logging
import re
from textwrap import dedent
from typing import Any, Dict, Optional

import openai
from diskcache import Cache

from ..core.config import settings
from ..core.constants import CacheConstants, FileConstants, PromptConstants
from ..core.errors import ClassifyError
from ..core.models import AnalysisResult, ClassifyOutcome
from ..core.rules import (
    LOCAL_SENTIMENT,
    URGENCY_OVERRIDE,
    URGENCY_OVERRIDE_KEYWORDS,
    canned_response,
    match_classification_rule,
)

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = dedent("""
You are an AI assistant for a civic issue detection platform. Analyze the following civic complaint and provide a structured response.

Complaint: "{complaint}"
{location_line}

Respond in the following JSON format ONLY (no additional text):
{{
    "category": "<one of: Infrastructure, Safety, Sanitation, Utilities, Noise, Environment, Other>",
    "sentiment": "<one of: positive, neutral, negative>",
    "urgency": "<one of: low, medium, high, critical>",
    "urgencyScore": <number 1-100>,
    "summary": "<brief 1-2 sentence summary of the issue>",
    "recommendations": ["<action 1>", "<action 2>", "<action 3>"]
}}
""").strip()

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def build_prompt(complaint: str, location: str = "") -> str:
    location_line = f"Location: {location}" if location else ""
    return ANALYSIS_PROMPT.format(complaint=complaint, location_line=location_line)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the brace-delimited JSON object embedded in a model reply.

    Tolerates markdown fences and commentary around the object.
    """
    match = _JSON_OBJECT_RE.search(text or "")
    if not match:
        raise ClassifyError("No JSON found in response", reason="no_json", response_snippet=(text or "")[:200])
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ClassifyError(f"Invalid JSON in response: {e}", reason="invalid_json",
                            response_snippet=match.group(0)[:200]) from e
    if not isinstance(data, dict):
        raise ClassifyError("Expected a JSON object", reason="invalid_json")
    return data


def _pick(value: Any, allowed, field: str) -> str:
    if isinstance(value, str):
        for option in allowed:
            if value.strip().lower() == option.lower():
                return option
    raise ClassifyError(f"Invalid {field}: {value!r}", reason="invalid_field")


def coerce_analysis(data: Dict[str, Any]) -> AnalysisResult:
    """Validate a model reply against the AnalysisResult contract."""
    missing = [k for k in ("category", "sentiment", "urgency", "urgencyScore", "summary", "recommendations")
               if k not in data]
    if missing:
        raise ClassifyError(f"Missing fields: {', '.join(missing)}", reason="missing_fields")

    category = _pick(data["category"], PromptConstants.CATEGORIES, "category")
    sentiment = _pick(data["sentiment"], PromptConstants.SENTIMENTS, "sentiment")
    urgency = _pick(data["urgency"], PromptConstants.URGENCIES, "urgency")

    raw_score = data["urgencyScore"]
    if isinstance(raw_score, bool):
        raise ClassifyError(f"Invalid urgencyScore: {raw_score!r}", reason="invalid_field")
    try:
        score = int(round(float(raw_score)))
    except (TypeError, ValueError, OverflowError):
        raise ClassifyError(f"Invalid urgencyScore: {raw_score!r}", reason="invalid_field")
    if not PromptConstants.MIN_URGENCY_SCORE <= score <= PromptConstants.MAX_URGENCY_SCORE:
        raise ClassifyError(f"urgencyScore out of range: {score}", reason="invalid_field")

    summary = data["summary"]
    if not isinstance(summary, str) or not summary.strip():
        raise ClassifyError("Empty summary", reason="invalid_field")

    recommendations = data["recommendations"]
    if isinstance(recommendations, str):
        recommendations = [recommendations]
    if not isinstance(recommendations, list) or not all(isinstance(r, str) for r in recommendations):
        raise ClassifyError("recommendations must be a list of strings", reason="invalid_field")

    return AnalysisResult(
        category=category,
        sentiment=sentiment,
        urgency=urgency,
        urgency_score=score,
        summary=summary.strip(),
        recommendations=[r.strip() for r in recommendations],
    )


class GeminiService:
    """Remote classifier talking to Gemini through its OpenAI-compatible endpoint."""

    def __init__(self, client=None, cache: Optional[Cache] = None, use_cache: Optional[bool] = None):
        self.client = client or openai.OpenAI(
            api_key=settings.effective_gemini_key,
            base_url=settings.gemini_base_url,
            timeout=settings.request_timeout,
            max_retries=0,  # one request per analysis
        )
        self.model = settings.gemini_model
        use_cache = settings.llm_cache_enabled if use_cache is None else use_cache
        self.cache = cache if cache is not None else (Cache(FileConstants.CACHE_DIR) if use_cache else None)
        logger.info(f"Gemini service initialized with model {self.model}")

    def chat(self, prompt: str) -> str:
        """Send one prompt and return the reply text. Raises ClassifyError."""
        cache_key = hashlib.md5(
            f"{self.model}|{prompt}|{PromptConstants.ANALYSIS_PROMPT_VERSION}".encode()
        ).hexdigest()
        if self.cache is not None:
            cached_response = self.cache.get(cache_key)
            if cached_response:
                logger.debug(f"Cache hit for analysis request: {cache_key[:CacheConstants.CACHE_KEY_LENGTH]}...")
                return cached_response

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=settings.gemini_temperature,
                max_tokens=settings.gemini_max_tokens,
            )
        except openai.APIStatusError as e:
            raise ClassifyError(f"API request failed: {e.status_code}", reason="http") from e
        except openai.APIError as e:
            raise ClassifyError(f"API request failed: {e}", reason="transport") from e

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ClassifyError("Unexpected response shape", reason="invalid_response") from e
        if not text:
            raise ClassifyError("Empty response", reason="invalid_response")

        if self.cache is not None:
            self.cache.set(cache_key, text, expire=3600 * settings.llm_cache_ttl_hours)
        return text

    def try_remote(self, complaint: str, location: str = "") -> ClassifyOutcome:
        """Classify through the API without falling back."""
        try:
            text = self.chat(build_prompt(complaint, location))
            return ClassifyOutcome(ok=True, result=coerce_analysis(extract_json_object(text)))
        except ClassifyError as e:
            return ClassifyOutcome(ok=False, error=e)


class FallbackLLMService:
    """Deterministic keyword classifier."""

    def __init__(self):
        logger.debug("Using fallback keyword classifier")

    def analyze_complaint(self, complaint: str) -> AnalysisResult:
        text_lower = (complaint or "").lower()
        category, urgency, urgency_score = match_classification_rule(text_lower)

        # Urgency keywords override whatever the category rule said
        if any(keyword in text_lower for keyword in URGENCY_OVERRIDE_KEYWORDS):
            urgency, urgency_score = URGENCY_OVERRIDE

        response = canned_response(category)
        return AnalysisResult(
            category=category,
            sentiment=LOCAL_SENTIMENT,
            urgency=urgency,
            urgency_score=urgency_score,
            summary=response["summary"],
            recommendations=list(response["recommendations"]),
        )


class ComplaintClassifier:
    """Remote classification with the keyword classifier as recovery branch.

    ``analyze`` never raises: a failed remote outcome is answered by the
    local classifier, which always succeeds.
    """

    def __init__(self, remote: Optional[GeminiService] = None, local: Optional[FallbackLLMService] = None):
        self.remote = remote
        self.local = local or FallbackLLMService()

    def analyze(self, complaint: str, location: str = "") -> AnalysisResult:
        if self.remote is None:
            logger.info("Using mock analysis (demo mode or API key not configured)")
            return self.local.analyze_complaint(complaint)

        outcome = self.remote.try_remote(complaint, location)
        if outcome.ok:
            return outcome.result
        logger.warning(f"Gemini analysis failed, using keyword fallback: {outcome.error}")
        return self.local.analyze_complaint(complaint)


class LLMServiceFactory:
    """Factory for creating the complaint classifier."""

    @staticmethod
    def create() -> ComplaintClassifier:
        """Create appropriate classifier."""
        if settings.effective_gemini_key and not settings.demo_mode:
            return ComplaintClassifier(remote=GeminiService())
        else:
            return ComplaintClassifier()
