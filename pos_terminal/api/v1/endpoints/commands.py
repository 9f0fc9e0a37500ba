"""Generic command endpoint: any engine operation in one envelope."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pos_terminal.api.deps import get_engine_services, get_terminal_context
from pos_terminal.api.responses import operation_response
from pos_terminal.db.session import get_db
from pos_terminal.services import commands
from pos_terminal.services.context import TerminalContext

router: APIRouter = APIRouter()


@router.post("")
def run_command(
    envelope: commands.CommandEnvelope,
    ctx: TerminalContext = Depends(get_terminal_context),
    services: commands.EngineServices = Depends(get_engine_services),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, envelope.command, services))
