"""Root route."""

from deps import APIRouter, HTMLResponse
from fastapi import Request

from ..templates import render_template

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def root(request: Request) -> str:
    """Root: welcome page with clickable links."""
    service = request.app.state.porter
    return render_template(
        "root.html",
        title="BASIC to QB64-PE Porter API",
        dialect_count=len(service.tables.dialects),
    )
