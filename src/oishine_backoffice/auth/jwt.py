"""
oishine_backoffice.auth.jwt

JWT issuing and validation helpers for admin credentials.

Responsibilities:
- Issue admin credentials (sub/role/email/name + registered claims).
- Decode and validate credentials with strict claim requirements.
- Keep "expired" distinguishable from every other validation failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import DecodeError, ExpiredSignatureError, InvalidSignatureError, InvalidTokenError

from oishine_backoffice.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


class JwtValidationError(Exception):
    pass


class JwtExpiredError(JwtValidationError):
    pass


class JwtMalformedError(JwtValidationError):
    # The token could not even be parsed (segments, base64, JSON).
    pass


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    role: str,
    email: str,
    name: str,
    ttl: timedelta = timedelta(hours=24),
    now: datetime | None = None,
) -> str:
    issued_at = now or datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "role": role,
        "email": email,
        "name": name,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except ExpiredSignatureError as e:
        raise JwtExpiredError(str(e)) from e
    except InvalidSignatureError as e:
        raise JwtValidationError(str(e)) from e
    except DecodeError as e:
        raise JwtMalformedError(str(e)) from e
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e


# --- Module Notes -----------------------------------------------------------
# Tokens are minted by `services.auth_service.AuthService.login` and verified by
# `auth.verifier.AdminVerifier`.
