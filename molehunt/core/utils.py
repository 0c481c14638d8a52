"""Shared utility functions for molehunt."""

import random
import numpy as np
import time
from datetime import datetime
from enum import Enum
from typing import Any, Dict
import json
import hashlib


def seed_everything(seed: int) -> None:
    """Set seed for reproducibility across all random number generators."""
    random.seed(seed)
    np.random.seed(seed)


def now_ms() -> int:
    """Get current Unix time in whole milliseconds."""
    return int(time.time() * 1000)


def deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with update taking precedence."""
    result = base.copy()
    for key, value in update.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def generate_game_id(prefix: str = "match") -> str:
    """Generate a unique match ID."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    random_suffix = hashlib.md5(str(time.time()).encode()).hexdigest()[:8]
    return f"{prefix}_{timestamp}_{random_suffix}"


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """Safely dump object to JSON, handling datetime, enums and dataclasses."""

    def default_handler(o):
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, set):
            return sorted(o)
        if isinstance(o, Enum):
            return o.value
        if hasattr(o, "to_dict"):
            return o.to_dict()
        if hasattr(o, "__dict__"):
            return o.__dict__
        return str(o)

    return json.dumps(obj, default=default_handler, **kwargs)
