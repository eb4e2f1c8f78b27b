from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt

from loanlink.core.settings import settings


class JWTKeyError(RuntimeError):
    pass


def _uses_asymmetric_keys() -> bool:
    return settings.jwt_algorithm.upper().startswith(("RS", "ES", "PS"))


@lru_cache(maxsize=1)
def _load_private_key() -> str:
    if settings.jwt_private_key:
        return settings.jwt_private_key
    if settings.jwt_private_key_path:
        return _read_key(settings.jwt_private_key_path)
    raise JWTKeyError("JWT private key not configured")


@lru_cache(maxsize=1)
def _load_public_key() -> str:
    if settings.jwt_public_key:
        return settings.jwt_public_key
    if settings.jwt_public_key_path:
        return _read_key(settings.jwt_public_key_path)
    raise JWTKeyError("JWT public key not configured")


def _read_key(path: str) -> str:
    with open(path, "r", encoding="utf-8") as key_file:
        return key_file.read()


def _signing_key() -> str:
    if _uses_asymmetric_keys():
        return _load_private_key()
    return settings.jwt_secret


def _verification_key() -> str:
    if _uses_asymmetric_keys():
        return _load_public_key()
    return settings.jwt_secret


def create_access_token(
    subject: str,
    *,
    email: str | None = None,
    role: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode: dict[str, Any] = {"sub": subject, "iat": now, "exp": expire, "type": "access"}
    if email is not None:
        to_encode["email"] = email
    if role is not None:
        to_encode["role"] = role
    return jwt.encode(to_encode, _signing_key(), algorithm=settings.jwt_algorithm)


def decode_token(token: str, expected_type: str | None = "access") -> dict[str, Any]:
    """Verify signature and expiry; every failure surfaces as ``ValueError("Invalid token")``."""
    try:
        payload = jwt.decode(token, _verification_key(), algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    if expected_type and payload.get("type") != expected_type:
        raise ValueError("Invalid token")
    return payload
