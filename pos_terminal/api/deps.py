"""Shared FastAPI dependencies for the terminal API."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pos_terminal.db.session import get_db
from pos_terminal.services.commands import EngineServices
from pos_terminal.services.context import TerminalContext
from pos_terminal.services.operator_service import resolve_terminal_context
from pos_terminal.services.payment_links import build_default_payment_link_client
from pos_terminal.services.printing import build_default_printer

bearer_scheme: HTTPBearer = HTTPBearer(auto_error=False)


def get_terminal_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> TerminalContext:
    """Resolve the operator and terminal from the Authorization header.

    Failures raise ``AuthenticationError``; the app turns it into the
    session-invalid 401 response.
    """
    token = credentials.credentials if credentials is not None else None
    return resolve_terminal_context(db, token)


def get_engine_services(ctx: TerminalContext = Depends(get_terminal_context)) -> EngineServices:
    return EngineServices(
        payment_links=build_default_payment_link_client(ctx.device_id),
        printer=build_default_printer(),
    )
