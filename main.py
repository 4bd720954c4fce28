from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, settings
from database import Base, build_engine, build_session_factory, init_models

logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The engine and session factory are created here and kept on
    ``app.state``; request handlers get their session through ``get_db``.
    """
    app_settings = app_settings or settings

    logging.basicConfig(
        level=app_settings.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Initialize database models
    init_models()
    engine = build_engine(app_settings.DATABASE_URL, echo=app_settings.SQL_ECHO)
    Base.metadata.create_all(bind=engine)

    app = FastAPI(
        title="TubeShare API",
        description="Video sharing backend: feeds, views, likes, comments and subscriptions.",
        version="1.0.0",
        openapi_tags=[
            {"name": "Authentication", "description": "Sign in and current user"},
            {"name": "Videos", "description": "Feeds, video detail, views, reactions and comments"},
            {"name": "Channels", "description": "Channel subscriptions"},
        ]
    )
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # Add CORS middleware with proper configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    from routers import auth, users, videos

    app.include_router(auth.router, prefix="/auth")
    app.include_router(videos.router, prefix="/videos")
    app.include_router(users.router, prefix="/users")

    @app.get("/health")
    async def health_check():
        return JSONResponse(
            status_code=200,
            content={"status": "ok", "message": "Service is running"}
        )

    logger.info(f"Application ready on {engine.url.render_as_string(hide_password=True)}")
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000)
