"""FastAPI app: /health, /port, /check, /keyboard-safety, /dialects, /keywords."""

from deps import CORSMiddleware, FastAPI, Optional

from .config import get_host, get_keywords_path, get_port, get_rules_path
from .logging_config import setup_logging
from .routes import (
    check_router,
    dialects_router,
    health_router,
    keyboard_router,
    port_router,
    root_router,
)
from .services import PorterService
from .startup import validate_config


def create_app(service: Optional[PorterService] = None) -> FastAPI:
    """Build the API. Table loading errors (ConfigurationError) propagate."""
    setup_logging()
    validate_config()
    app = FastAPI(
        title="BASIC to QB64-PE Porter API",
        description="Ports legacy BASIC to QB64-PE and checks source for compatibility problems.",
        version="0.1.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.porter = service or PorterService(get_rules_path(), get_keywords_path())

    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(port_router)
    app.include_router(check_router)
    app.include_router(keyboard_router)
    app.include_router(dialects_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=get_host(), port=get_port())
