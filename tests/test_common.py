import pytest
from jose import JWTError, jwt

from mentor.common.deps import ANONYMOUS_USER, CurrentUser, decode_token, user_from_claims
from mentor.common.errors import DuplicateSubmission, NotFound, to_http
from mentor.common.utils import ensure_str_list, extract_json_object, round_half_up
from mentor.core.config import get_settings
from mentor.db.supabase import is_unique_violation

from fakesupabase import api_error


def test_extract_json_object_variants():
    assert extract_json_object('{"a": 1}') == {"a": 1}
    assert extract_json_object('Sure!\n```json\n{"a": 2}\n```\nEnjoy') == {"a": 2}
    assert extract_json_object('prefix {"a": "brace } inside", "b": {"c": 3}} suffix') == {
        "a": "brace } inside",
        "b": {"c": 3},
    }
    with pytest.raises(ValueError):
        extract_json_object("no json here")
    with pytest.raises(ValueError):
        extract_json_object("   ")


def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(4.5) == 5
    assert round_half_up(0.5) == 1
    assert round_half_up(7.49) == 7


def test_ensure_str_list_normalises_inputs():
    assert ensure_str_list(None) == []
    assert ensure_str_list(" one ") == ["one"]
    assert ensure_str_list('["a", " b ", ""]') == ["a", "b"]
    assert ensure_str_list([1, "x"]) == ["1", "x"]


def test_domain_errors_translate_to_http_detail():
    duplicate = to_http(DuplicateSubmission("sub-1"))
    assert duplicate.status_code == 400
    assert duplicate.detail == {
        "error_code": "E_DUPLICATE_SUBMISSION",
        "message": "You have already submitted code for this challenge",
        "submission_id": "sub-1",
    }
    assert to_http(NotFound("Challenge not found")).status_code == 404


def test_unique_violation_detection():
    assert is_unique_violation(api_error("dup", code="23505"))
    assert is_unique_violation(Exception('duplicate key value violates unique constraint "x"'))
    assert not is_unique_violation(api_error("timeout", code="57014"))


def test_token_claims_resolve_user(monkeypatch):
    monkeypatch.setattr(get_settings(), "jwt_secret", "unit-secret")
    token = jwt.encode({"id": "42", "email": "e@x.io", "firstName": "Ed", "lastName": "Ng"}, "unit-secret")

    user = user_from_claims(decode_token(token))

    assert user == CurrentUser(id="42", email="e@x.io", first_name="Ed", last_name="Ng")
    assert user.display_name == "Ed Ng"
    assert ANONYMOUS_USER.display_name == "Anonymous User"
    assert ANONYMOUS_USER.is_anonymous


def test_token_without_secret_or_id_is_rejected(monkeypatch):
    monkeypatch.setattr(get_settings(), "jwt_secret", "")
    with pytest.raises(JWTError):
        decode_token("anything")

    with pytest.raises(JWTError):
        user_from_claims({"email": "no-id@example.com"})
