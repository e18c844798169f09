"""Identifier types accepted at the HTTP boundary.

Member and user ids are PostgreSQL UUIDs. They travel through the service as
canonical lower-case strings; anything that is not a UUID is rejected as a
validation error before it reaches a query.
"""

import uuid
from typing import Annotated

from pydantic import AfterValidator


def canonical_uuid(value: str) -> str:
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise ValueError(f"not a valid id: {value!r}") from None


UuidStr = Annotated[str, AfterValidator(canonical_uuid)]
