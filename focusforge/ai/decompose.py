"""
Tool: Task Decomposer
Purpose: Break an overwhelming task into 3-5 small, concrete steps

Key insight: the decomposition itself takes executive function the user
may not have right now, so the app offers it proactively.

Two decomposers share one interface (async decompose(request) -> list):
- GeminiDecomposer: asks the Gemini API over HTTP
- RuleBasedDecomposer: keyword templates, no network, always available

decompose_task() validates the request, tries the configured decomposer,
and falls back to the rules when the model call fails.

Usage:
    python -m focusforge.cli decompose "Write quarterly report"

Dependencies:
    - httpx (Gemini API calls)
    - pydantic (request/suggestion validation)

Output:
    JSON result with suggestions and which decomposer produced them
"""

import json
import os
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from focusforge.ai import MAX_SUGGESTIONS, MIN_SUGGESTIONS
from focusforge.ai.models import DecomposeRequest, SubtaskSuggestion
from focusforge.config import AIConfig
from focusforge.logging_config import get_logger

logger = get_logger(__name__)


class DecompositionError(Exception):
    """The decomposer could not produce usable suggestions."""


# ─────────────────────────────────────────────────────────────────────────────
# Rule-based decomposer
# ─────────────────────────────────────────────────────────────────────────────

TEMPLATES: Dict[str, List[Dict[str, Any]]] = {
    "write": [
        {"title": "Open a blank document and write a 2-line goal", "estimated_minutes": 5, "tips": "Silence notifications before you begin."},
        {"title": "Create a quick outline with 3 bullet points", "estimated_minutes": 10, "tips": "Use simple words first; polish later."},
        {"title": "Draft only the first section", "estimated_minutes": 20, "tips": "Set a timer and stop when it ends."},
        {"title": "Take a 5-minute walk and return for edits", "estimated_minutes": 10, "tips": "Movement can reset attention quickly."},
    ],
    "study": [
        {"title": "Collect study materials in one tab/window", "estimated_minutes": 8, "tips": "Remove unrelated tabs to reduce friction."},
        {"title": "Review one concept and write 3 key notes", "estimated_minutes": 15, "tips": "Handwritten notes can improve retention."},
        {"title": "Solve two practice questions", "estimated_minutes": 20, "tips": "Treat mistakes as checkpoints, not failure."},
    ],
}

FALLBACK_TEMPLATE: List[Dict[str, Any]] = [
    {"title": "Define what done looks like in one sentence", "estimated_minutes": 5, "tips": "Clarity first prevents procrastination."},
    {"title": "Do the smallest visible first action", "estimated_minutes": 10, "tips": "Start with an action that takes under 10 minutes."},
    {"title": "Continue with one focused sprint", "estimated_minutes": 20, "tips": "Use headphones or white noise if helpful."},
    {"title": "Close with a short review and next step", "estimated_minutes": 8, "tips": "Leave a clear restart point for later."},
]

TEMPLATE_KEYWORDS = {
    "write": ("write", "essay", "report"),
    "study": ("study", "exam", "learn"),
}


class RuleBasedDecomposer:
    """Keyword templates. Used when no API key is configured or the model fails."""

    name = "rules"

    async def decompose(self, request: DecomposeRequest) -> List[SubtaskSuggestion]:
        lowered = request.title.lower()

        template = FALLBACK_TEMPLATE
        for template_name, keywords in TEMPLATE_KEYWORDS.items():
            if any(keyword in lowered for keyword in keywords):
                template = TEMPLATES[template_name]
                break

        return [SubtaskSuggestion(**item) for item in template[:MAX_SUGGESTIONS]]


# ─────────────────────────────────────────────────────────────────────────────
# Gemini decomposer
# ─────────────────────────────────────────────────────────────────────────────

PROMPT_TEMPLATE = """You are a productivity coach specializing in ADHD-friendly task management.

Break down this task into 3-5 small, actionable subtasks that each take 5-25 minutes.

Task: "{title}"{details}

Respond ONLY with a JSON array. Each item must have:
- "title": short actionable step (max 80 chars)
- "estimated_minutes": number between 5 and 25
- "tips": one brief ADHD-friendly tip (max 100 chars)

Example: [{{"title":"Write outline","estimated_minutes":10,"tips":"Start with bullet points, don't overthink"}}]"""

JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def build_prompt(request: DecomposeRequest) -> str:
    details = f"\nDetails: {request.description}" if request.description else ""
    return PROMPT_TEMPLATE.format(title=request.title, details=details)


def parse_suggestions(text: str) -> List[SubtaskSuggestion]:
    """
    Extract suggestions from model output.

    The model sometimes wraps the array in a markdown code block or adds
    prose, so the first [...] span is parsed and each item is sanitized.
    """
    match = JSON_ARRAY_PATTERN.search(text)
    if not match:
        raise DecompositionError("Failed to parse model response as JSON array")

    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise DecompositionError(f"Failed to parse model response as JSON: {e}") from e

    if not isinstance(items, list):
        raise DecompositionError("Model response is not a JSON array")

    suggestions = [s for s in (SubtaskSuggestion.sanitize(item) for item in items) if s is not None]
    suggestions = suggestions[:MAX_SUGGESTIONS]

    if len(suggestions) < MIN_SUGGESTIONS:
        raise DecompositionError(f"Model returned {len(suggestions)} usable steps, need at least {MIN_SUGGESTIONS}")

    return suggestions


class GeminiDecomposer:
    """Gemini generateContent over httpx."""

    name = "gemini"

    def __init__(self, api_key: str, config: Optional[AIConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self.config = config or AIConfig()
        self._client = client

    async def decompose(self, request: DecomposeRequest) -> List[SubtaskSuggestion]:
        url = f"{self.config.base_url}/models/{self.config.model}:generateContent"
        body = {
            "contents": [{"parts": [{"text": build_prompt(request)}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": 1024,
            },
        }

        client = self._client or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        try:
            response = await client.post(url, params={"key": self.api_key}, json=body)
        except httpx.HTTPError as e:
            raise DecompositionError(f"Gemini request failed: {e}") from e
        finally:
            if self._client is None:
                await client.aclose()

        if response.status_code != 200:
            logger.error(f"Gemini API error {response.status_code}: {response.text[:200]}")
            raise DecompositionError(f"Gemini API returned {response.status_code}")

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise DecompositionError(f"Unexpected Gemini response shape: {e}") from e

        return parse_suggestions(text)


# ─────────────────────────────────────────────────────────────────────────────
# Factory and entry point
# ─────────────────────────────────────────────────────────────────────────────


def create_decomposer(config: Optional[AIConfig] = None):
    """Gemini when configured and keyed, otherwise rules."""
    config = config or AIConfig()

    if config.provider == "rules":
        return RuleBasedDecomposer()

    api_key = os.environ.get(config.api_key_env)
    if api_key:
        return GeminiDecomposer(api_key, config)

    if config.provider == "gemini":
        logger.warning(f"{config.api_key_env} not set, using rule-based decomposition")

    return RuleBasedDecomposer()


async def decompose_task(
    title: str,
    description: Optional[str] = None,
    decomposer=None,
    fallback: bool = True,
) -> Dict[str, Any]:
    """
    Suggest 3-5 small steps for a task.

    Args:
        title: Task title (1-120 characters)
        description: Optional details (up to 1000 characters)
        decomposer: Decomposer to use (create_decomposer() if None)
        fallback: Use the rule-based decomposer if the first one fails

    Returns:
        dict with suggestions and the decomposer source
    """
    try:
        request = DecomposeRequest(title=title, description=description)
    except ValidationError as e:
        issues = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        return {"success": False, "error": f"Invalid request payload: {issues}"}

    decomposer = decomposer or create_decomposer()

    try:
        suggestions = await decomposer.decompose(request)
        source = decomposer.name
    except DecompositionError as e:
        if not fallback or isinstance(decomposer, RuleBasedDecomposer):
            return {"success": False, "error": f"Failed to decompose task: {e}"}
        logger.warning(f"{decomposer.name} decomposition failed, falling back to rules: {e}")
        suggestions = await RuleBasedDecomposer().decompose(request)
        source = "rules"

    return {
        "success": True,
        "data": {
            "title": request.title,
            "suggestions": [s.model_dump() for s in suggestions],
            "source": source,
        },
        "message": f"Task decomposed into {len(suggestions)} steps",
    }


__all__ = [
    "DecompositionError",
    "GeminiDecomposer",
    "RuleBasedDecomposer",
    "build_prompt",
    "create_decomposer",
    "decompose_task",
    "parse_suggestions",
]
