import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import LargeBinary
from sqlalchemy.types import TypeDecorator

from loanlink.core.settings import settings


@lru_cache(maxsize=4)
def _fernet_for(secret: str) -> Fernet:
    # Fernet wants a 32-byte urlsafe key; SECRET_KEY may be any string.
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


class EncryptedString(TypeDecorator):
    """Text column stored as a Fernet token, for applicant identifiers such as national ids."""

    impl = LargeBinary
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return _fernet_for(settings.secret_key).encrypt(str(value).encode("utf-8"))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        try:
            return _fernet_for(settings.secret_key).decrypt(bytes(value)).decode("utf-8")
        except InvalidToken as exc:
            raise ValueError("Stored value cannot be decrypted with the current SECRET_KEY") from exc


__all__ = ["EncryptedString"]
