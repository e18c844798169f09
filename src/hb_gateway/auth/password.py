"""bcrypt password hashing for hb_gateway users.

Talks to the ``bcrypt`` package directly; passlib is not used.
bcrypt only reads the first 72 bytes of a secret, so longer passwords are
rejected at the schema layer (RegisterRequest.password max_length).
"""

import bcrypt

_ENCODING = "utf-8"


def hash_password(plain: str) -> str:
    """Salted bcrypt hash of ``plain`` as a text column value."""
    return bcrypt.hashpw(plain.encode(_ENCODING), bcrypt.gensalt()).decode(_ENCODING)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(_ENCODING), hashed.encode(_ENCODING))
    except ValueError:
        # Malformed stored hash: treat as a failed login rather than a 500
        return False
