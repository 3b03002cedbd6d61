from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import admin, dapps, events, health, sessions
from .config import settings
from .logging_config import setup_logging
from .middleware import RateLimitMiddleware, RequestLoggingMiddleware


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="dApp SSO API",
        description="Wallet session single sign-on for registered dApps",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # dApps on any origin query auto-connect and record connections
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, tags=["Health"])
    app.include_router(sessions.router, tags=["Sessions"])
    app.include_router(dapps.router, tags=["dApps"])
    app.include_router(admin.router, tags=["Admin"])
    app.include_router(events.router, tags=["Events"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "dApp SSO API",
            "version": __version__,
            "chain_id": settings.chain_id,
            "docs": "/docs",
            "health": "/healthz"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "dapp_sso.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
