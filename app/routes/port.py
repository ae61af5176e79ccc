"""Porting routes."""

from deps import APIRouter, HTTPException, Response
from fastapi import Request

from ..report_formatter import format_port_report
from ..schemas import PortRequest, PortResponse

router = APIRouter()


def _run_port(request: Request, req: PortRequest) -> PortResponse:
    service = request.app.state.porter
    try:
        result = service.port(req.code, req.options)
    except ValueError as e:
        raise HTTPException(422, str(e))
    return service.port_response(result)


@router.post("/port", response_model=PortResponse)
def port(request: Request, req: PortRequest) -> PortResponse:
    """Port legacy BASIC source to QB64-PE."""
    return _run_port(request, req)


@router.post("/port/report")
def port_report(request: Request, req: PortRequest) -> Response:
    """Port and return a Markdown report, including issues left in the ported code."""
    result = _run_port(request, req)
    remaining = request.app.state.porter.check(result.ported_code).issues
    return Response(content=format_port_report(result, remaining), media_type="text/markdown")
