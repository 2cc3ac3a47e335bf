from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

from jsonschema import ValidationError, validate

from mentor.adapters.llm_client import (
    ProviderError,
    ProviderUnavailable,
    TextGenerator,
    build_text_generator,
)
from mentor.common.errors import ValidationFailed
from mentor.common.utils import ensure_str_list, extract_json_object
from mentor.core.config import get_settings
from mentor.features.challenges.repository import ChallengeRepository, challenge_repository
from mentor.features.challenges.templates import (
    CATEGORIES,
    CHALLENGE_PROMPTS,
    DIFFICULTIES,
    get_fallback_challenge,
)

logger = logging.getLogger("mentor.challenges")

SYSTEM_PROMPT = (
    "You are a senior developer creating coding challenges for junior developers. "
    "Focus on practical, real-world skills."
)

CHALLENGE_SCHEMA = {
    "type": "object",
    "required": ["title", "description", "requirements", "hints", "technologies", "estimatedTime"],
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "description": {"type": "string", "minLength": 1},
        "requirements": {"type": "array", "minItems": 1, "items": {"type": "string"}},
        "hints": {"type": "array", "items": {"type": "string"}},
        "technologies": {"type": "array", "items": {"type": "string"}},
        "estimatedTime": {"type": ["integer", "number", "string"]},
        "exampleCode": {"type": ["string", "null"]},
    },
    "additionalProperties": True,
}


def build_challenge_prompt(difficulty: str, category: str) -> str:
    return f"""{CHALLENGE_PROMPTS[difficulty][category]}

Please provide a JSON response with the following structure:
{{
  "title": "Challenge title",
  "description": "Detailed description of what to build",
  "requirements": ["requirement 1", "requirement 2", "requirement 3"],
  "hints": ["hint 1", "hint 2", "hint 3"],
  "technologies": ["tech1", "tech2"],
  "estimatedTime": 60,
  "exampleCode": "// Optional starter code or null"
}}

Make it practical, engaging, and focused on real-world skills that would impress recruiters."""


def _coerce_minutes(value: Any) -> Optional[int]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    minutes = int(round(number))
    return minutes if minutes > 0 else None


def normalise_generated_challenge(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Map a validated model payload onto stored challenge fields.

    Raises ``ValueError`` when required text or a usable time estimate is missing.
    """
    title = str(payload.get("title") or "").strip()
    description = str(payload.get("description") or "").strip()
    requirements = ensure_str_list(payload.get("requirements"))
    if not title or not description or not requirements:
        raise ValueError("generated challenge is missing title/description/requirements")
    minutes = _coerce_minutes(payload.get("estimatedTime"))
    if minutes is None:
        raise ValueError("generated challenge has no positive estimatedTime")
    example = payload.get("exampleCode")
    if isinstance(example, str):
        example = example.strip() or None
    else:
        example = None
    return {
        "title": title,
        "description": description,
        "requirements": requirements,
        "hints": ensure_str_list(payload.get("hints")),
        "technologies": ensure_str_list(payload.get("technologies")),
        "estimated_time": minutes,
        "example_code": example,
    }


class ChallengeService:
    def __init__(self, generator: TextGenerator, repository: ChallengeRepository = challenge_repository) -> None:
        self.generator = generator
        self.repository = repository

    @staticmethod
    def validate_request(difficulty: Any, category: Any) -> None:
        if not isinstance(difficulty, str) or difficulty not in DIFFICULTIES:
            raise ValidationFailed("Invalid difficulty level")
        if not isinstance(category, str) or category not in CATEGORIES:
            raise ValidationFailed("Invalid category")

    async def _generate(self, difficulty: str, category: str) -> Dict[str, Any]:
        prompt = build_challenge_prompt(difficulty, category)
        try:
            raw = await self.generator.complete(SYSTEM_PROMPT, prompt, max_tokens=1500, temperature=0.7)
            payload = extract_json_object(raw)
            validate(instance=payload, schema=CHALLENGE_SCHEMA)
            generated = normalise_generated_challenge(payload)
        except ProviderUnavailable:
            logger.info("challenge_fallback reason=provider_unconfigured difficulty=%s category=%s", difficulty, category)
            return get_fallback_challenge(difficulty, category)
        except (ProviderError, ValidationError, ValueError, TypeError) as exc:
            logger.warning(
                "challenge_fallback reason=%s difficulty=%s category=%s error=%s",
                type(exc).__name__,
                difficulty,
                category,
                exc,
            )
            return get_fallback_challenge(difficulty, category)
        generated.update({"difficulty": difficulty, "category": category, "is_active": True})
        logger.info("challenge_generated provider=%s difficulty=%s category=%s", self.generator.name, difficulty, category)
        return generated

    async def create_challenge(self, difficulty: Any, category: Any, user_id: Optional[str] = None) -> Dict[str, Any]:
        self.validate_request(difficulty, category)
        data = await self._generate(difficulty, category)
        data["user_id"] = user_id
        return await self.repository.create(data)


def build_challenge_service() -> ChallengeService:
    settings = get_settings()
    return ChallengeService(
        build_text_generator(settings.challenge_api_key, settings.challenge_model, settings)
    )


challenge_service = build_challenge_service()

__all__ = [
    "CHALLENGE_SCHEMA",
    "ChallengeService",
    "build_challenge_prompt",
    "challenge_service",
    "normalise_generated_challenge",
]
