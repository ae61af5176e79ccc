"""Check route (compatibility analysis)."""

from fastapi import APIRouter, Request

from ..schemas import CheckRequest, CheckResponse

router = APIRouter()


@router.post("/check", response_model=CheckResponse)
def check(request: Request, req: CheckRequest) -> CheckResponse:
    """Compatibility issues sorted by line and column. The source is not modified."""
    return request.app.state.porter.check(req.code)
