"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accounts.api import api_router
from accounts.core.config import Settings, get_settings
from accounts.core.errors import AccountsError
from accounts.core.log import configure_logging
from accounts.core.security import TokenSigner
from accounts.db.session import Database
from accounts.services.users import SqlUserRepository

logger = logging.getLogger(__name__)


async def _handle_accounts_error(_: Request, exc: AccountsError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    database = database or Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        await database.create_all()
        logger.info("%s started with database %s", settings.app_name, database.engine.url.render_as_string())
        try:
            yield
        finally:
            await database.dispose()
            logger.info("%s stopped", settings.app_name)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.repository = SqlUserRepository(database)
    app.state.token_signer = TokenSigner(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AccountsError, _handle_accounts_error)
    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    from uvicorn import run

    run(app, host="0.0.0.0", port=8000, log_level="info")
