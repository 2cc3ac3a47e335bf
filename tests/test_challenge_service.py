import json

import httpx
import pytest

from mentor.adapters.llm_client import NullTextGenerator, OpenAIChatGenerator
from mentor.common.errors import ValidationFailed
from mentor.features.challenges.service import ChallengeService, build_challenge_prompt
from mentor.features.challenges.templates import (
    CATEGORIES,
    DIFFICULTIES,
    FALLBACK_CHALLENGES,
    get_fallback_challenge,
)

pytestmark = pytest.mark.anyio("asyncio")


def _openai(handler):
    return OpenAIChatGenerator(
        "sk-test",
        "gpt-4o-mini",
        api_url="https://llm.test/v1/chat/completions",
        transport=httpx.MockTransport(handler),
    )


def _completion(content):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def test_fallback_table_covers_every_cell():
    assert len(DIFFICULTIES) * len(CATEGORIES) == 21
    for difficulty in DIFFICULTIES:
        for category in CATEGORIES:
            cell = FALLBACK_CHALLENGES[difficulty][category]
            assert cell["title"] and cell["description"]
            assert cell["requirements"] and cell["technologies"]
            assert cell["estimated_time"] > 0
            assert cell["example_code"] is None


def test_fallback_returns_independent_copies():
    first = get_fallback_challenge("beginner", "react")
    first["requirements"].append("mutated")

    again = get_fallback_challenge("beginner", "react")
    assert "mutated" not in again["requirements"]
    assert again["title"] == "Interactive Counter Component"
    assert again["estimated_time"] == 30
    assert again["is_active"] is True


def test_prompt_names_json_contract():
    prompt = build_challenge_prompt("advanced", "typescript")

    assert prompt.startswith("Create an advanced TypeScript challenge")
    assert '"estimatedTime": 60' in prompt
    assert "impress recruiters" in prompt


@pytest.mark.parametrize("difficulty", DIFFICULTIES)
@pytest.mark.parametrize("category", CATEGORIES)
async def test_unconfigured_provider_persists_fallback(fake_db, difficulty, category):
    service = ChallengeService(NullTextGenerator())

    row = await service.create_challenge(difficulty, category)

    expected = FALLBACK_CHALLENGES[difficulty][category]
    assert row["title"] == expected["title"]
    assert row["estimated_time"] == expected["estimated_time"]
    assert row["difficulty"] == difficulty and row["category"] == category
    assert row["id"] and row["created_at"]
    assert fake_db.rows("challenges")[0]["id"] == row["id"]


async def test_invalid_enums_rejected_before_any_call(fake_db):
    calls = []

    def handler(request):
        calls.append(request)
        return _completion("{}")

    service = ChallengeService(_openai(handler))

    with pytest.raises(ValidationFailed, match="Invalid difficulty level"):
        await service.create_challenge("expert", "react")
    with pytest.raises(ValidationFailed, match="Invalid category"):
        await service.create_challenge("beginner", "cobol")

    assert calls == []
    assert fake_db.calls == []


async def test_live_provider_payload_is_normalised(fake_db):
    generated = {
        "title": "  Debounced Search Box ",
        "description": "Build a search input that waits for the user to stop typing.",
        "requirements": ["Debounce input by 300ms", "Show loading state"],
        "hints": ["useEffect cleanup cancels timers"],
        "technologies": ["React", "TypeScript"],
        "estimatedTime": "75",
        "exampleCode": "",
    }
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _completion("Here you go:\n```json\n" + json.dumps(generated) + "\n```")

    service = ChallengeService(_openai(handler))
    row = await service.create_challenge("intermediate", "react", user_id="user-9")

    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert seen["body"]["max_tokens"] == 1500
    assert seen["body"]["messages"][0]["role"] == "system"
    assert row["title"] == "Debounced Search Box"
    assert row["estimated_time"] == 75
    assert row["example_code"] is None
    assert row["user_id"] == "user-9"
    assert row["difficulty"] == "intermediate"


async def test_unparseable_response_falls_back(fake_db):
    service = ChallengeService(_openai(lambda request: _completion("I cannot help with that.")))

    row = await service.create_challenge("advanced", "node")

    assert row["title"] == "Microservices Architecture"


async def test_schema_violation_falls_back(fake_db):
    service = ChallengeService(_openai(lambda request: _completion(json.dumps({"title": "Only a title"}))))

    row = await service.create_challenge("beginner", "css")

    assert row["title"] == "Responsive Card Layout"


async def test_provider_error_status_falls_back(fake_db):
    service = ChallengeService(_openai(lambda request: httpx.Response(503, json={"error": "overloaded"})))

    row = await service.create_challenge("intermediate", "javascript")

    assert row["title"] == "Weather App with API"
    assert row["estimated_time"] == 120


@pytest.mark.parametrize("estimate", ["1e400", "Infinity", "NaN"])
async def test_non_finite_estimate_falls_back(fake_db, estimate):
    content = (
        '{"title": "Huge", "description": "Too long to finish", "requirements": ["a"],'
        ' "hints": [], "technologies": [], "estimatedTime": ' + estimate + "}"
    )
    service = ChallengeService(_openai(lambda request: _completion(content)))

    row = await service.create_challenge("beginner", "react")

    assert row["title"] == "Interactive Counter Component"
    assert row["estimated_time"] == 30
