from fastapi import APIRouter

from slipgen.api.schemas import LoginRequest, LoginResponse
from slipgen.core.security import check_api_key, issue_operator_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest) -> LoginResponse:
    check_api_key(payload.api_key)
    operator = payload.operator.strip() or "operator"
    return LoginResponse(token=issue_operator_token(operator), operator=operator)
