"""FastAPI application factory."""
from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel
from payrun import __version__
from payrun.domain.exceptions import ConflictError, NotAuthorizedError, NotFoundError
from payrun.logging import logger


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from payrun.infra.db.engine import engine  # triggers WAL pragma + mapper registration
        from payrun.infra.db.schema_compat import ensure_schema_compat
        SQLModel.metadata.create_all(engine)
        ensure_schema_compat(engine)
        logger.info("payrun API %s started", __version__)
        yield

    app = FastAPI(
        title="Payrun Payroll API",
        version=__version__,
        lifespan=lifespan,
    )

    # Import routers inside create_app() to avoid circular imports at module load time
    from payrun.api.routers.organizations import router as organizations_router
    from payrun.api.routers.payroll_runs import router as payroll_runs_router
    from payrun.api.routers.payslips import router as payslips_router
    from payrun.api.routers.employees import router as employees_router
    from payrun.api.routers.ledger import router as ledger_router

    app.include_router(organizations_router)
    app.include_router(payroll_runs_router)
    app.include_router(payslips_router)
    app.include_router(employees_router)
    app.include_router(ledger_router)

    @app.exception_handler(NotFoundError)
    def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(ConflictError)
    def _conflict(request: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.message})

    @app.exception_handler(NotAuthorizedError)
    def _forbidden(request: Request, exc: NotAuthorizedError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.message})

    @app.get("/health", tags=["ops"])
    def health() -> dict:
        return {"status": "ok"}

    return app
