"""JSONB column helpers for raw text() SQL.

Parameters are bound as JSON text and CAST(... AS JSONB) in the statement.
"""

import json
from typing import Any


def dump_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def load_json(value: Any) -> Any:
    """asyncpg may hand back JSONB either decoded or as text depending on codecs."""
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value
