"""Token service — issues and verifies signed session tokens."""

from datetime import datetime, timedelta, timezone

import jwt
from jwt.exceptions import InvalidAlgorithmError, MissingRequiredClaimError, PyJWTError

from api.auth.dto.auth import TokenClaims
from errors import InvalidTokenError, SigningError

ALGORITHM = "HS256"
ACCEPTED_ALGORITHMS = ["HS256", "HS384", "HS512"]
ISSUER = "minidrive.app"
DEFAULT_TTL = timedelta(days=7)


def issue_token(
    user,
    secret: str,
    ttl: timedelta = DEFAULT_TTL,
    now: datetime | None = None,
) -> str:
    """Sign a token carrying the user's id, username and email, valid for ``ttl``."""
    if not secret:
        raise SigningError("Failed to generate token")

    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "id": user.id,
        "username": user.username or "",
        "email": user.email,
        "iat": issued_at,
        "exp": issued_at + ttl,
        "iss": ISSUER,
    }
    try:
        return jwt.encode(payload, secret, algorithm=ALGORITHM)
    except PyJWTError as e:
        raise SigningError("Failed to generate token") from e


def verify_token(token: str, secret: str, now: datetime | None = None) -> TokenClaims:
    """Check signature, algorithm and expiry; return the decoded claims."""
    if not token or not secret:
        raise InvalidTokenError("Invalid token")

    try:
        # Expiry is compared below against ``now`` so callers control the clock.
        payload = jwt.decode(
            token,
            secret,
            algorithms=ACCEPTED_ALGORITHMS,
            options={"require": ["exp"], "verify_exp": False, "verify_iat": False},
        )
    except MissingRequiredClaimError as e:
        raise InvalidTokenError("Invalid token claims: missing expiration") from e
    except InvalidAlgorithmError as e:
        raise InvalidTokenError("Unexpected signing method") from e
    except PyJWTError as e:
        raise InvalidTokenError("Invalid token") from e

    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise InvalidTokenError("Invalid token claims: missing expiration")

    current = (now or datetime.now(timezone.utc)).timestamp()
    if current > exp:
        raise InvalidTokenError("Token expired")

    user_id = payload.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise InvalidTokenError("Invalid claims")

    return TokenClaims(
        id=user_id,
        username=payload.get("username") or "",
        email=payload.get("email") or "",
        exp=int(exp),
    )
