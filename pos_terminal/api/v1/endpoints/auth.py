"""Operator authentication endpoints (API JWT)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pos_terminal.api.deps import get_terminal_context
from pos_terminal.db.session import get_db
from pos_terminal.schemas.auth import LoginRequest, OperatorResponse, TokenResponse
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.operator_service import get_operator, login_operator

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    token = login_operator(db, username=payload.username, password=payload.password, device_id=payload.device_id)
    return TokenResponse(access_token=token)


@router.get("/me", response_model=OperatorResponse)
def me(ctx: TerminalContext = Depends(get_terminal_context), db: Session = Depends(get_db)) -> OperatorResponse:
    return OperatorResponse.model_validate(get_operator(db, ctx.user_id))
