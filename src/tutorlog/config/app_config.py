"""Application configuration loader.

Loads configuration from data/config/tutorlog_v1.yaml, falling back to
built-in defaults when the file is missing.

Usage:
    from tutorlog.config.app_config import load_app_config

    config = load_app_config()
    table = config.keywords

Example file:
    database:
      path: db/tutorlog.db
    keywords:
      - {keyword: 제곱근, label: 제곱근}
      - {keyword: 느림, label: 연산속도}
    analytics:
      default_total_sessions: 8
      summary_max_chars: 50
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from tutorlog.core.records import LogKind
from tutorlog.core.tagging import KeywordRule

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/tutorlog_v1.yaml")

# Environment override for the database file
DB_PATH_ENV = "TUTORLOG_DB_PATH"

DEFAULT_KEYWORDS: list[tuple[str, str]] = [
    ("제곱근", "제곱근"),
    ("분수", "분수"),
    ("역수", "역수"),
    ("느림", "연산속도"),
    ("빠르지", "연산속도"),
    ("어설픔", "개념부족"),
    ("설명", "서술형"),
    ("이유", "서술형"),
    ("헷갈", "개념혼동"),
    ("오답", "오답패턴"),
    ("실수", "단순실수"),
]


@dataclass
class AnalyticsConfig:
    """Tunables for progress, ranking and recommendation."""

    default_total_sessions: int = 8
    summary_max_chars: int = 50
    recent_lesson_window: int = 5
    top_weaknesses: int = 3
    goal_change_kind: LogKind = LogKind.CONSULTATION


@dataclass
class AppConfig:
    """Application-wide configuration."""

    db_path: Path = Path("db/tutorlog.db")
    keywords: list[KeywordRule] = field(default_factory=list)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {"path": "db/tutorlog.db"},
        "keywords": [{"keyword": k, "label": v} for k, v in DEFAULT_KEYWORDS],
        "analytics": {
            "default_total_sessions": 8,
            "summary_max_chars": 50,
            "recent_lesson_window": 5,
            "top_weaknesses": 3,
            "goal_change_kind": "consultation",
        },
    }


def _parse_keywords(items: list[Any]) -> list[KeywordRule]:
    """Parse keyword entries, accepting mappings or [keyword, label] pairs."""
    rules = []
    for item in items:
        if isinstance(item, dict):
            keyword, label = item.get("keyword", ""), item.get("label", "")
        else:
            keyword, label = item
        if not keyword or not label:
            logger.warning("config.keyword_skipped", entry=item)
            continue
        rules.append(KeywordRule(keyword=str(keyword), label=str(label)))
    return rules


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    db_data = data.get("database") or {}
    db_path = Path(db_data.get("path", defaults["database"]["path"]))
    if os.environ.get(DB_PATH_ENV):
        db_path = Path(os.environ[DB_PATH_ENV])

    keyword_items = data.get("keywords")
    if keyword_items is None:
        keyword_items = defaults["keywords"]

    a_data = {**defaults["analytics"], **(data.get("analytics") or {})}
    analytics = AnalyticsConfig(
        default_total_sessions=int(a_data["default_total_sessions"]),
        summary_max_chars=int(a_data["summary_max_chars"]),
        recent_lesson_window=int(a_data["recent_lesson_window"]),
        top_weaknesses=int(a_data["top_weaknesses"]),
        goal_change_kind=LogKind.parse(a_data["goal_change_kind"]),
    )

    return AppConfig(
        db_path=db_path,
        keywords=_parse_keywords(keyword_items),
        analytics=analytics,
    )


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
