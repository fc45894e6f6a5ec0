from __future__ import annotations

import json
import logging
import os
from datetime import timezone, tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from storycast.analytics.models import PLACEHOLDER_COVER

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_METADATA_DIR = Path(
    os.environ.get("STORYCAST_METADATA_DIR", REPO_ROOT / ".metadata")
)
SETTINGS_PATH = DEFAULT_METADATA_DIR / "settings.json"


def _default_settings() -> dict[str, Any]:
    return {
        "analytics": {
            "timezone": os.environ.get("STORYCAST_TIMEZONE", "UTC"),
            "workers": 4,
            "history_page_size": 20,
            "streak_history_days": 7,
        },
        "storage": {
            "public_url": os.environ.get("STORYCAST_STORAGE_PUBLIC_URL", ""),
            "placeholder_cover": PLACEHOLDER_COVER,
        },
    }


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = _deep_merge(base[key], value)
        else:
            merged[key] = value
    return merged


def load_settings() -> dict[str, Any]:
    defaults = _default_settings()
    if not SETTINGS_PATH.exists():
        return defaults
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable settings file %s", SETTINGS_PATH)
        return defaults
    if not isinstance(data, dict):
        return defaults
    return _deep_merge(defaults, data)


def update_settings(patch: dict[str, Any]) -> dict[str, Any]:
    current = load_settings()
    updated = _deep_merge(current, patch)
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(updated, indent=2, sort_keys=True, ensure_ascii=True) + "\n",
        encoding="utf-8",
    )
    return updated


def _analytics_section(settings: dict[str, Any] | None) -> dict[str, Any]:
    settings = settings or load_settings()
    analytics = settings.get("analytics") if isinstance(settings, dict) else {}
    return analytics if isinstance(analytics, dict) else {}


def resolve_timezone(settings: dict[str, Any] | None = None) -> tzinfo:
    """Local timezone day boundaries are computed in; UTC if unknown."""
    name = _analytics_section(settings).get("timezone") or "UTC"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to UTC", name)
        return timezone.utc


def resolve_int(settings: dict[str, Any] | None, key: str, default: int) -> int:
    value = _analytics_section(settings).get(key)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def resolve_storage(settings: dict[str, Any] | None = None) -> tuple[str, str]:
    """Public storage base URL and placeholder cover image."""
    settings = settings or load_settings()
    storage = settings.get("storage") if isinstance(settings, dict) else {}
    if not isinstance(storage, dict):
        storage = {}
    public_url = (storage.get("public_url") or "").rstrip("/")
    placeholder = storage.get("placeholder_cover") or PLACEHOLDER_COVER
    return public_url, placeholder
