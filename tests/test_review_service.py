import asyncio
import json

import httpx
import pytest
from postgrest.exceptions import APIError

from fakesupabase import api_error
from mentor.adapters.llm_client import NullTextGenerator, OpenAIChatGenerator, ProviderUnavailable
from mentor.common.errors import NotFound, ReviewNotReady
from mentor.features.reviews.service import ReviewService, clamp_score

pytestmark = pytest.mark.anyio("asyncio")

SCORE_FIVE_CODE = """// add two numbers
const add = (a, b) => a + b;
console.log(add(2, 3));"""


def _submission(submission_id="sub-1", challenge_id="chal-1", **extra):
    row = {
        "id": submission_id,
        "user_id": "user-1",
        "challenge_id": challenge_id,
        "code": SCORE_FIVE_CODE,
        "language": "javascript",
        "submission_method": "paste",
        "submitted_at": "2026-01-05T10:00:00+00:00",
        "is_reviewed": False,
        "review_id": None,
        "review_status": "pending",
        "review_attempts": 0,
        "last_error": None,
    }
    row.update(extra)
    return row


@pytest.fixture
def seeded(fake_db, challenge_row):
    fake_db.tables["challenges"] = [challenge_row("chal-1")]
    fake_db.tables["code_submissions"] = [_submission()]
    return fake_db


class SlowGenerator:
    """Yields to the loop before answering so concurrent reviews interleave."""

    name = "slow"
    model = "slow-model"

    async def complete(self, system, prompt, *, max_tokens=1500, temperature=0.7):
        await asyncio.sleep(0.01)
        raise ProviderUnavailable("no provider in tests")


async def test_fallback_review_is_stored_and_submission_completed(seeded):
    outcome = await ReviewService(NullTextGenerator()).review_submission("sub-1")

    assert outcome.created is True
    review = outcome.review
    assert review["overall_score"] == 5
    assert review["ai_model"] == "fallback-analyzed"
    assert review["submission_id"] == "sub-1"
    assert review["user_id"] == "user-1"
    submission = seeded.rows("code_submissions")[0]
    assert submission["is_reviewed"] is True
    assert submission["review_status"] == "completed"
    assert submission["review_id"] == review["id"]


async def test_second_review_returns_same_record(seeded):
    service = ReviewService(NullTextGenerator())
    first = await service.review_submission("sub-1")
    second = await service.review_submission("sub-1")

    assert second.created is False
    assert second.review["id"] == first.review["id"]
    assert len(seeded.rows("code_reviews")) == 1


async def test_missing_submission_or_challenge_is_not_found(seeded):
    service = ReviewService(NullTextGenerator())
    with pytest.raises(NotFound, match="Submission not found"):
        await service.review_submission("missing")

    seeded.tables["code_submissions"].append(_submission("sub-2", challenge_id="gone"))
    with pytest.raises(NotFound, match="Challenge not found"):
        await service.review_submission("sub-2")


async def test_concurrent_reviews_produce_one_record(seeded):
    service = ReviewService(SlowGenerator())

    results = await asyncio.gather(
        service.review_submission("sub-1"),
        service.review_submission("sub-1"),
        return_exceptions=True,
    )

    outcomes = [r for r in results if not isinstance(r, BaseException)]
    pending = [r for r in results if isinstance(r, ReviewNotReady)]
    assert len(outcomes) == 1 and len(pending) == 1
    assert len(seeded.rows("code_reviews")) == 1

    again = await service.review_submission("sub-1")
    assert again.review["id"] == outcomes[0].review["id"]


async def test_unique_conflict_returns_existing_review(seeded):
    existing = {
        "id": "rev-existing",
        "submission_id": "sub-1",
        "user_id": "user-1",
        "challenge_id": "chal-1",
        "overall_score": 9,
    }
    seeded.tables["code_reviews"] = [existing]
    # submission still claimable: another writer inserted but has not marked it yet
    service = ReviewService(NullTextGenerator())

    outcome = await service.review_submission("sub-1")

    assert outcome.created is False
    assert outcome.review["id"] == "rev-existing"
    assert len(seeded.rows("code_reviews")) == 1
    assert seeded.rows("code_submissions")[0]["review_id"] == "rev-existing"


async def test_store_failure_releases_claim_for_retry(seeded):
    service = ReviewService(NullTextGenerator())
    seeded.fail("insert", "code_reviews", api_error("connection reset"))

    with pytest.raises(APIError):
        await service.review_submission("sub-1")

    submission = seeded.rows("code_submissions")[0]
    assert submission["review_status"] == "failed"
    assert submission["review_attempts"] == 1
    assert "connection reset" in submission["last_error"]

    seeded.failures.clear()
    outcome = await service.review_submission("sub-1")
    assert outcome.created is True
    assert seeded.rows("code_submissions")[0]["review_status"] == "completed"


async def test_claimed_elsewhere_without_review_is_not_ready(seeded):
    seeded.rows("code_submissions")[0]["review_status"] = "processing"

    with pytest.raises(ReviewNotReady):
        await ReviewService(NullTextGenerator()).review_submission("sub-1")


async def test_completed_submission_missing_its_review_is_reviewed_again(seeded):
    submission = seeded.rows("code_submissions")[0]
    submission.update({"is_reviewed": True, "review_status": "completed", "review_id": "rev-gone"})

    outcome = await ReviewService(NullTextGenerator()).review_submission("sub-1")

    assert outcome.created is True
    assert len(seeded.rows("code_reviews")) == 1
    assert submission["review_status"] == "completed"
    assert submission["review_id"] == outcome.review["id"]


async def test_live_review_is_validated_and_clamped(seeded):
    payload = {
        "overallScore": 12,
        "feedback": {
            "strengths": ["Clear naming"],
            "improvements": ["Handle NaN input"],
            "bugs": [],
            "suggestions": ["Add unit tests"],
        },
        "codeQuality": {"readability": 8, "structure": -2, "efficiency": 7.5, "bestPractices": 6},
        "careerTips": ["Write about your trade-offs in PRs"],
        "nextSteps": ["Try the intermediate track"],
        "resources": [{"title": "MDN Functions", "url": "https://developer.mozilla.org/", "type": "documentation"}],
    }
    prompts = []

    def handler(request):
        prompts.append(json.loads(request.content)["messages"][1]["content"])
        return httpx.Response(200, json={"choices": [{"message": {"content": json.dumps(payload)}}]})

    generator = OpenAIChatGenerator(
        "sk-review", "gpt-4o-mini", api_url="https://llm.test/v1/chat", transport=httpx.MockTransport(handler)
    )
    outcome = await ReviewService(generator).review_submission("sub-1")

    review = outcome.review
    assert "Interactive Counter Component" in prompts[0]
    assert SCORE_FIVE_CODE in prompts[0]
    assert review["overall_score"] == 10
    assert review["code_quality"] == {"readability": 8, "structure": 0, "efficiency": 8, "best_practices": 6}
    assert review["ai_model"] == "gpt-4o-mini"
    assert review["resources"][0]["type"] == "documentation"


async def test_live_review_with_bad_resource_type_falls_back(seeded):
    payload = {
        "overallScore": 7,
        "feedback": {"strengths": [], "improvements": [], "bugs": [], "suggestions": []},
        "codeQuality": {"readability": 7, "structure": 7, "efficiency": 7, "bestPractices": 7},
        "careerTips": [],
        "nextSteps": [],
        "resources": [{"title": "x", "url": "y", "type": "podcast"}],
    }
    generator = OpenAIChatGenerator(
        "sk-review",
        "gpt-4o-mini",
        api_url="https://llm.test/v1/chat",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": {"content": json.dumps(payload)}}]})
        ),
    )

    outcome = await ReviewService(generator).review_submission("sub-1")

    assert outcome.review["ai_model"] == "fallback-analyzed"
    assert outcome.review["overall_score"] == 5


@pytest.mark.parametrize("score", ["Infinity", "-Infinity", "1e400"])
async def test_non_finite_scores_fall_back_to_heuristic_review(seeded, score):
    content = (
        '{"overallScore": ' + score + ', "feedback": {"strengths": [], "improvements": [], "bugs": [],'
        ' "suggestions": []}, "codeQuality": {"readability": 7, "structure": 7, "efficiency": 7,'
        ' "bestPractices": 7}, "careerTips": [], "nextSteps": [], "resources": []}'
    )
    generator = OpenAIChatGenerator(
        "sk-review",
        "gpt-4o-mini",
        api_url="https://llm.test/v1/chat",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": {"content": content}}]})
        ),
    )

    outcome = await ReviewService(generator).review_submission("sub-1")

    assert outcome.created is True
    assert outcome.review["ai_model"] == "fallback-analyzed"
    assert outcome.review["overall_score"] == 5
    assert seeded.rows("code_submissions")[0]["review_status"] == "completed"


async def test_review_status_reports_progress(seeded):
    service = ReviewService(NullTextGenerator())

    before = await service.review_status("sub-1")
    assert before["status"] == "pending"
    assert before["review"] is None

    await service.review_submission("sub-1")
    after = await service.review_status("sub-1")
    assert after["status"] == "completed"
    assert after["is_reviewed"] is True
    assert after["review"]["submission_id"] == "sub-1"

    with pytest.raises(NotFound):
        await service.review_status("missing")


async def test_list_reviews_is_paginated_and_enriched(seeded, challenge_row):
    seeded.tables["challenges"].append(challenge_row("chal-2", difficulty="advanced", category="css"))
    seeded.tables["code_submissions"].append(_submission("sub-2", challenge_id="chal-2"))
    service = ReviewService(NullTextGenerator())
    await service.review_submission("sub-1")
    await service.review_submission("sub-2")
    seeded.rows("code_reviews")[0]["reviewed_at"] = "2026-01-05T10:00:00+00:00"
    seeded.rows("code_reviews")[1]["reviewed_at"] = "2026-01-06T10:00:00+00:00"

    page = await service.list_reviews("user-1", limit=1, offset=0)

    assert page["pagination"] == {"limit": 1, "offset": 0, "total": 2}
    item = page["items"][0]
    assert item["review"]["submission_id"] == "sub-2"
    assert item["challenge"]["difficulty"] == "advanced"
    assert item["submission"]["submissionMethod"] == "paste"

    rest = await service.list_reviews("user-1", limit=10, offset=1)
    assert [i["review"]["submission_id"] for i in rest["items"]] == ["sub-1"]


def test_clamp_score_bounds():
    assert clamp_score(11) == 10
    assert clamp_score(-1) == 0
    assert clamp_score(6.5) == 7
    assert clamp_score("n/a") == 0
    assert clamp_score(float("inf")) == 10
    assert clamp_score(float("-inf")) == 0
    assert clamp_score(float("nan")) == 0
