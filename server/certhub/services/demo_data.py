"""
Demo Data Service.

Keeps the demo exams and question bank in a YAML file so the content can be
edited without touching code.
"""
import logging
import os
import yaml
from typing import Any, Dict, List, Optional
from functools import lru_cache

from certhub.errors import InvalidInput
from certhub.models import Level, Question

logger = logging.getLogger(__name__)

# Bundled seed file
DEFAULT_DEMO_FILE = os.path.join(os.path.dirname(__file__), "..", "seeds", "demo_data.yaml")


@lru_cache(maxsize=8)
def _load_seed_file(path: str) -> Dict[str, Any]:
    """Load a seed file from YAML with caching."""
    if not os.path.exists(path):
        raise InvalidInput(f"demo data file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise InvalidInput(f"demo data file must contain a mapping: {path}")
    return data


def load_demo_data(path: Optional[str] = None) -> Dict[str, List[dict]]:
    """
    Read and validate demo content.

    Args:
        path: YAML file to read, the bundled file when empty

    Returns:
        Dict with ``exams`` (title, organization_name, level, questions) and
        ``questions`` (standalone Question objects)
    """
    path = path or DEFAULT_DEMO_FILE
    raw = _load_seed_file(os.path.abspath(path))

    try:
        exams = []
        for entry in raw.get("exams", []):
            exams.append({
                "title": entry["title"],
                "organization_name": entry.get("organization_name", ""),
                "level": Level(entry.get("level", Level.BEGINNER.value)),
                "questions": [Question(**q) for q in entry.get("questions", [])],
            })

        questions = [Question(**q) for q in raw.get("questions", [])]
    except (KeyError, ValueError) as e:
        # ValueError covers pydantic's ValidationError and unknown levels
        raise InvalidInput(f"invalid demo data in {path}: {e}") from e

    logger.debug("Loaded %d demo exams and %d demo questions from %s", len(exams), len(questions), path)
    return {"exams": exams, "questions": questions}


def clear_cache():
    """Clear the seed cache (useful after editing the YAML file)."""
    _load_seed_file.cache_clear()
