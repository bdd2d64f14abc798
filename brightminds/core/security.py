"""Identity Token Verification and Code Generation"""

import secrets
import string
from typing import Optional

from jose import JWTError, jwt

from brightminds.config import settings


def decode_token(token: str) -> Optional[dict]:
    """
    Verify an identity-provider token and return its claims.

    Args:
        token: Bearer token issued by the identity provider

    Returns:
        Decoded token payload (``sub`` is the user id) or None if invalid
    """
    options = {"verify_aud": bool(settings.IDENTITY_TOKEN_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            settings.IDENTITY_TOKEN_SECRET,
            algorithms=[settings.IDENTITY_TOKEN_ALGORITHM],
            audience=settings.IDENTITY_TOKEN_AUDIENCE or None,
            options=options,
        )
    except JWTError:
        return None


JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_join_code(length: int = 8) -> str:
    """
    Generate a classroom join code.

    Uppercase letters and digits. Uniqueness is enforced by the
    ``classrooms.unique_code`` constraint, not here.
    """
    return ''.join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))
