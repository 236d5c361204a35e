import base64

import pytest
from fastapi import HTTPException

from slipgen.core.security import check_api_key, issue_operator_token, read_operator_token


def test_operator_token_round_trip():
    token = issue_operator_token("desk-2", now=1_700_000_000)

    assert read_operator_token(token, now=1_700_000_100) == "desk-2"


def test_expired_or_tampered_token_is_rejected():
    token = issue_operator_token("desk-2", now=1_700_000_000)

    assert read_operator_token(token, now=1_700_000_000 + 9 * 60 * 60) is None
    raw = base64.urlsafe_b64decode(token).decode("utf-8")
    forged = base64.urlsafe_b64encode(raw.replace("desk-2", "admin", 1).encode("utf-8")).decode("utf-8")
    assert read_operator_token(forged, now=1_700_000_100) is None
    assert read_operator_token("not-a-token") is None


def test_wrong_api_key_is_unauthorized():
    with pytest.raises(HTTPException) as exc_info:
        check_api_key("wrong")
    assert exc_info.value.status_code == 401
