"""Utility functions for formkit"""

import logging
import re
from pathlib import Path
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)


def canonicalify(p: Path | str) -> Path:
    return Path(p).expanduser().resolve()


def ensure_path(p: Path | str) -> Path:
    path = canonicalify(p)
    path.mkdir(parents=True, exist_ok=True)
    return path


def label_from_name(name: str) -> str:
    """Build a human label from a field name.

    Examples:
        >>> label_from_name("country_id")
        'Country id'
        >>> label_from_name("address.postalCode")
        'Postal code'
    """
    if not name:
        return ""

    last = name.rsplit(".", 1)[-1]
    kebab = re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", last).lower()
    words = re.sub(r"[-_]+", " ", kebab).strip()
    return words[:1].upper() + words[1:]


def unique(items: Iterable[str]) -> List[str]:
    """De-duplicate while keeping first-occurrence order."""
    return list(dict.fromkeys(items))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict, tuple, set)):
        return len(value) == 0
    return False


def selected_values(state_value: Any) -> List[str]:
    """Normalize a field's current value into a list of selected option values."""
    if state_value is None or state_value == "":
        return []

    if isinstance(state_value, (list, tuple, set)):
        return [str(v) for v in state_value if v is not None and v != ""]

    return [str(state_value)]
