"""Translate operation outcomes into HTTP responses."""

from fastapi.responses import JSONResponse

from pos_terminal.services.commands import OperationResult


def operation_response(result: OperationResult) -> JSONResponse:
    """Serialize the result; failures carry the status of their error kind."""
    return JSONResponse(status_code=result.status_code, content=result.model_dump(mode="json"))
