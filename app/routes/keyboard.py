"""Keyboard buffer safety route."""

from fastapi import APIRouter, Request

from ..schemas import CheckRequest, KeyboardSafetyResponse

router = APIRouter()


@router.post("/keyboard-safety", response_model=KeyboardSafetyResponse)
def keyboard_safety(request: Request, req: CheckRequest) -> KeyboardSafetyResponse:
    """Keyboard buffer hazards with risk levels and a usage summary."""
    return request.app.state.porter.keyboard_safety(req.code)
