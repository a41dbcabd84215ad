from __future__ import annotations

from tourguide.core.credentials import is_api_key_valid, load_gemini_api_key


def test_load_prefers_first_usable_store():
    primary = {"GEMINI_API_KEY": "YOUR_GEMINI_API_KEY_HERE"}
    fallback = {"GEMINI_API_KEY": "AIzaFromInfo"}
    assert load_gemini_api_key(primary, fallback) == "AIzaFromInfo"
    assert load_gemini_api_key({"GEMINI_API_KEY": " AIzaTrimmed "}) == "AIzaTrimmed"


def test_load_returns_none_when_absent():
    assert load_gemini_api_key({}, {"GEMINI_API_KEY": ""}) is None
    assert load_gemini_api_key() is None


def test_validity_check():
    assert is_api_key_valid("AIzaSyExample")
    assert not is_api_key_valid(None)
    assert not is_api_key_valid("")
    assert not is_api_key_valid("YOUR_GEMINI_API_KEY_HERE")
    assert not is_api_key_valid("sk-other-provider")
