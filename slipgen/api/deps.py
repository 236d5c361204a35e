from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session

from slipgen.core.security import read_operator_token
from slipgen.db.session import get_db_session
from slipgen.services.link_generator import SlipLinkGenerator, build_link_generator


def get_db() -> Session:
    yield from get_db_session()


def require_operator(authorization: str | None = Header(default=None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    operator = read_operator_token(authorization.split(" ", 1)[1])
    if not operator:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session token")
    return operator


_generator: SlipLinkGenerator | None = None


def get_link_generator() -> SlipLinkGenerator:
    global _generator
    if _generator is None:
        _generator = build_link_generator()
    return _generator
