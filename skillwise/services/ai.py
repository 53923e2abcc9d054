import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol
import httpx
from skillwise.config import settings
from skillwise.core.errors import AIConfigurationError, ExternalServiceError
from skillwise.services import prompts
from skillwise.services.scoring import calculate_difficulty, round_half_up
from skillwise.services.validation import normalize_difficulty

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = {
    "challenge": 1500,
    "feedback": 1000,
    "hints": 500,
    "suggestions": 600,
    "analysis": 800,
}

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class CompletionClient(Protocol):
    model: str

    def ensure_configured(self) -> None:
        ...

    async def complete(self, prompt: str, max_tokens: int) -> str:
        ...


class CohereClient:
    """Chat completion over the Cohere v1 chat endpoint. No retries."""

    def __init__(
        self,
        api_key: Optional[str],
        url: str,
        model: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        self.transport = transport

    def ensure_configured(self) -> None:
        if not self.api_key:
            raise AIConfigurationError("COHERE_API_KEY is not configured")

    async def complete(self, prompt: str, max_tokens: int) -> str:
        self.ensure_configured()

        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        payload = {
            "model": self.model,
            "message": prompt,
            "max_tokens": max_tokens,
            "temperature": 0.7,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                r = await client.post(self.url, headers=headers, json=payload)
                r.raise_for_status()
            except httpx.TimeoutException as e:
                logger.error("Cohere API timed out after %ss", self.timeout)
                raise ExternalServiceError("AI provider timed out") from e
            except httpx.HTTPStatusError as e:
                detail = _error_detail(e.response)
                logger.error("Cohere API error %s: %s", e.response.status_code, detail)
                raise ExternalServiceError(f"AI provider call failed: {detail}") from e
            except httpx.HTTPError as e:
                logger.error("Cohere API request failed: %s", e)
                raise ExternalServiceError(f"AI provider call failed: {e}") from e

        try:
            text = r.json().get("text")
        except (ValueError, AttributeError) as e:
            raise ExternalServiceError("AI provider returned a malformed response") from e
        if not isinstance(text, str):
            raise ExternalServiceError("AI provider returned no text")
        return text


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


def parse_ai_response(text: str) -> Dict[str, Any]:
    """Pull the JSON object out of a model reply.

    Replies sometimes wrap the object in a fenced block or surround it with
    prose; both are tolerated. Anything that is not a JSON object is an
    upstream failure.
    """
    fenced = _FENCED_JSON.search(text or "")
    candidate = fenced.group(1) if fenced else (text or "")
    obj = _JSON_OBJECT.search(candidate)
    cleaned = obj.group(0) if obj else candidate.strip()
    try:
        data = json.loads(cleaned)
    except ValueError:
        logger.error("AI response was not valid JSON: %.200s", text)
        raise ExternalServiceError("AI response was not valid JSON")
    if not isinstance(data, dict):
        raise ExternalServiceError("AI response was not a JSON object")
    return data


def feedback_score(feedback: Dict[str, Any]) -> Optional[int]:
    """Map the 1–10 code quality score onto the 0–100 submission score."""
    raw = feedback.get("code_quality_score")
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return max(0, min(100, round_half_up(raw * 10)))


def stored_feedback(raw: str) -> Dict[str, Any]:
    """Decode feedback saved on a submission. Plain reviewer text is wrapped as an assessment."""
    try:
        data = json.loads(raw)
    except ValueError:
        return {"overall_assessment": raw}
    return data if isinstance(data, dict) else {"overall_assessment": raw}


class AIService:
    def __init__(self, client: CompletionClient, max_tokens: Optional[int] = None):
        self.client = client
        self.max_tokens = max_tokens

    def ensure_configured(self) -> None:
        self.client.ensure_configured()

    def _tokens(self, kind: str) -> int:
        return self.max_tokens or DEFAULT_MAX_TOKENS[kind]

    def _metadata(self, kind: str, **extra) -> Dict[str, Any]:
        meta = {
            "type": kind,
            "model": getattr(self.client, "model", None),
            "generated_at": datetime.now(timezone.utc).isoformat(),
        }
        meta.update(extra)
        return meta

    async def _ask(self, kind: str, prompt: str) -> Dict[str, Any]:
        text = await self.client.complete(prompts.with_preamble(kind, prompt), self._tokens(kind))
        return parse_ai_response(text)

    async def generate_challenge(
        self, category: str = "programming", difficulty: str = "medium", topic: Optional[str] = None
    ) -> Dict[str, Any]:
        difficulty = normalize_difficulty(difficulty)
        prompt = prompts.render(
            "challenge",
            category=category,
            difficulty=difficulty,
            difficulty_description=prompts.DIFFICULTY_DESCRIPTIONS[difficulty],
            topic_line=f"**Specific Topic:** {topic}\n" if topic else "",
        )
        challenge = await self._ask("challenge", prompt)
        challenge.setdefault("category", category)
        challenge.setdefault("difficulty_level", difficulty)
        if not challenge.get("title"):
            raise ExternalServiceError("AI response is missing a challenge title")

        logger.info("AI challenge generated (category=%s, difficulty=%s, topic=%s)", category, difficulty, topic)
        return {
            "challenge": challenge,
            "metadata": self._metadata(
                "challenge",
                category=category,
                difficulty=difficulty,
                topic=topic,
                difficulty_score=calculate_difficulty(challenge),
            ),
        }

    async def generate_feedback(self, submission_text: str, challenge) -> Dict[str, Any]:
        prompt = prompts.render(
            "feedback",
            challenge_title=challenge.title,
            challenge_instructions=challenge.instructions or challenge.description or "",
            submission=submission_text,
        )
        feedback = await self._ask("feedback", prompt)
        logger.info("AI feedback generated for challenge %s", challenge.id)
        return {
            "feedback": feedback,
            "metadata": self._metadata("feedback", challenge_id=challenge.id, score=feedback_score(feedback)),
        }

    async def generate_hints(self, challenge, previous_attempts: int = 0) -> Dict[str, Any]:
        level = prompts.hint_level(previous_attempts)
        prompt = prompts.render(
            "hints",
            challenge_title=challenge.title,
            challenge_instructions=challenge.instructions or challenge.description or "",
            attempt_number=previous_attempts + 1,
            hint_level=level,
        )
        hints = await self._ask("hints", prompt)
        hints.setdefault("hint_level", level)
        return hints

    async def suggest_next_challenges(self, completed: List[tuple]) -> Dict[str, Any]:
        summary = ", ".join(
            f"{category or 'general'} ({difficulty}): {count} challenges"
            for category, difficulty, count in completed
        ) or "No challenges completed yet"
        suggestions = await self._ask("suggestions", prompts.render("suggestions", completed_summary=summary))
        if not isinstance(suggestions.get("suggestions"), list):
            raise ExternalServiceError("AI response is missing a suggestions list")
        return suggestions

    async def analyze_progress(self, stats: Dict[str, Any]) -> Dict[str, Any]:
        average = stats.get("average_score")
        prompt = prompts.render(
            "analysis",
            challenges_completed=stats.get("challenges_completed", 0),
            average_score=f"{average:.1f}" if average is not None else "no scored submissions",
            total_points=stats.get("total_points", 0),
        )
        analysis = await self._ask("analysis", prompt)
        return {"analysis": analysis, "metadata": self._metadata("analysis", **stats)}


def build_default_client() -> CohereClient:
    return CohereClient(
        api_key=settings.COHERE_API_KEY,
        url=settings.COHERE_API_URL,
        model=settings.COHERE_MODEL,
        timeout=settings.AI_TIMEOUT_SECONDS,
    )
