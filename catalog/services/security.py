"""
Access Tokens

The catalog does not log anyone in. Accounts authenticate with the
account service, which signs short-lived JWT access tokens with the
secret shared through settings.secret_key. The catalog verifies those
tokens and reads the account id from the ``sub`` claim.

create_access_token() produces tokens in the same format, for the
account service and for tests:

    token = create_access_token({"sub": str(account.id)})
    claims = read_access_token(token)  # {"sub": "7", "type": "access", "exp": ...}
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from catalog.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

ACCESS_TOKEN_TYPE = "access"
ACCESS_TOKEN_LIFETIME = timedelta(minutes=15)


def create_access_token(claims: dict, expires_delta: timedelta | None = None) -> str:
    payload = {
        **claims,
        "exp": datetime.now(UTC) + (expires_delta or ACCESS_TOKEN_LIFETIME),
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def read_access_token(token: str) -> dict | None:
    """
    Verify an access token and return its claims.

    Returns None when the signature or expiry check fails, or when the
    token is not an access token (e.g. a refresh token of the account
    service).
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        return None

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        logger.warning(f"Rejected token of type {claims.get('type')!r}")
        return None

    return claims
