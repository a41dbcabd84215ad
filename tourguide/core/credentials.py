from __future__ import annotations

from typing import Mapping, Optional

GEMINI_KEY_NAME = "GEMINI_API_KEY"
PLACEHOLDER_KEY = "YOUR_GEMINI_API_KEY_HERE"
GEMINI_KEY_PREFIX = "AIza"


def load_gemini_api_key(*stores: Mapping[str, Optional[str]]) -> Optional[str]:
    """First usable key from the given key-value stores, in order."""
    for store in stores:
        value = (store.get(GEMINI_KEY_NAME) or "").strip()
        if value and value != PLACEHOLDER_KEY:
            return value
    return None


def is_api_key_valid(api_key: Optional[str]) -> bool:
    if not api_key:
        return False
    return api_key != PLACEHOLDER_KEY and api_key.startswith(GEMINI_KEY_PREFIX)
