"""FastAPI application for the Admission Service."""
from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

from libs.common.middleware import add_observability_middleware  # noqa: E402
from services.admission_service.routers import (  # noqa: E402
    admission_router,
    attendance_router,
    members_router,
    records_router,
)


def create_app() -> FastAPI:
    """Create and configure the Admission Service FastAPI app."""
    app = FastAPI(
        title="Door Admission Service",
        version="0.1.0",
        description="Membership admission checks and door sign-in records.",
    )
    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "admission"}

    app.include_router(admission_router)
    app.include_router(members_router)
    app.include_router(records_router)
    app.include_router(attendance_router)

    return app


app = create_app()
