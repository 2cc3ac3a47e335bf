import sys
import os

import pytest

# Ensure repo root on sys.path for imports like `mentor...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from mentor.db import supabase as supabase_module  # noqa: E402
from fakesupabase import FakeSupabase  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeSupabase()
    monkeypatch.setattr(supabase_module, "_client_async", db)
    return db


@pytest.fixture
def challenge_row():
    def _make(challenge_id="chal-1", difficulty="beginner", category="react", **extra):
        row = {
            "id": challenge_id,
            "title": "Interactive Counter Component",
            "description": "Build a counter.",
            "difficulty": difficulty,
            "category": category,
            "requirements": ["Use useState"],
            "hints": [],
            "technologies": ["React"],
            "estimated_time": 30,
            "example_code": None,
            "user_id": None,
            "is_active": True,
            "created_at": "2026-01-05T10:00:00+00:00",
        }
        row.update(extra)
        return row

    return _make
