from __future__ import annotations

import base64

from cryptography.fernet import Fernet, InvalidToken


def build_fernet(key: str | None) -> Fernet | None:
    """Fernet from a urlsafe base64 key, or from a raw 32-byte passphrase."""
    if not key:
        return None
    raw = key.encode("utf-8")
    if len(raw) == 32:
        raw = base64.urlsafe_b64encode(raw)
    return Fernet(raw)


def seal_secret(fernet: Fernet | None, secret: str) -> str:
    if not fernet:
        return secret
    return fernet.encrypt(secret.encode("utf-8")).decode("utf-8")


def open_secret(fernet: Fernet | None, blob: str) -> str:
    if not fernet:
        return blob
    try:
        return fernet.decrypt(blob.encode("utf-8")).decode("utf-8")
    except InvalidToken as exc:
        raise ValueError("Stored secret cannot be decrypted with the configured key") from exc
