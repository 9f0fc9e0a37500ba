"""Order line endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pos_terminal.api.deps import get_terminal_context
from pos_terminal.api.responses import operation_response
from pos_terminal.db.session import get_db
from pos_terminal.schemas.order import SetLineQtyRequest
from pos_terminal.services import commands
from pos_terminal.services.context import TerminalContext

router: APIRouter = APIRouter()


@router.put("/{line_id}")
def set_line_qty(
    line_id: int,
    payload: SetLineQtyRequest,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.SetLineQty(line_id=line_id, qty=payload.qty)))


@router.delete("/{line_id}")
def remove_line(
    line_id: int,
    ctx: TerminalContext = Depends(get_terminal_context),
    db: Session = Depends(get_db),
) -> JSONResponse:
    return operation_response(commands.dispatch(db, ctx, commands.RemoveLine(line_id=line_id)))
