import base64
import hashlib
import hmac
import time
from typing import Optional

from fastapi import HTTPException, status

from slipgen.core.config import get_settings


def _signature(message: str) -> str:
    settings = get_settings()
    digest = hmac.new(
        settings.secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.urlsafe_b64encode(digest).decode("utf-8")


def issue_operator_token(operator: str, *, now: int | None = None) -> str:
    settings = get_settings()
    expires_at = int(now if now is not None else time.time()) + settings.token_ttl_seconds
    body = f"{operator}:{expires_at}"
    raw = f"{body}:{_signature(body)}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("utf-8")


def read_operator_token(token: str, *, now: int | None = None) -> Optional[str]:
    """Return the operator name for a valid, unexpired token, else None."""
    try:
        raw = base64.urlsafe_b64decode(token.encode("utf-8")).decode("utf-8")
        operator, expires_raw, signature = raw.rsplit(":", 2)
        expires_at = int(expires_raw)
    except (ValueError, UnicodeDecodeError):
        return None

    if not hmac.compare_digest(signature, _signature(f"{operator}:{expires_raw}")):
        return None
    if expires_at < int(now if now is not None else time.time()):
        return None
    return operator


def check_api_key(api_key: str) -> None:
    settings = get_settings()
    if not hmac.compare_digest(api_key, settings.local_api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
