import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .broadcaster import ConnectionRegistry, NotificationBroadcaster
from .config import Settings
from .db import close_db, create_engine, create_session_factory, init_db
from .errors import TaskBoardError
from .logging_setup import setup_logging
from .repositories import SqlActivityLogRepository, SqlTaskRepository
from .routes import activity, realtime, tasks
from .service import TaskService

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[TaskService] = None,
    connections: Optional[ConnectionRegistry] = None,
) -> FastAPI:
    """
    Build the application.

    When ``service`` is given it is used as is and no database is touched;
    otherwise the SQL repositories are wired up during startup.
    """
    settings = settings or Settings.from_env()
    connections = connections if connections is not None else ConnectionRegistry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        engine = None
        if app.state.task_service is None:
            setup_logging(settings.log_level, settings.log_dir)
            engine = create_engine(settings)
            try:
                await init_db(engine)
            except Exception as e:
                logger.warning("Database connection failed: %s", e)
                logger.warning("Application will start but database features may not work")
            session_factory = create_session_factory(engine)
            app.state.task_service = TaskService(
                SqlTaskRepository(session_factory),
                SqlActivityLogRepository(session_factory),
                NotificationBroadcaster(app.state.connections),
            )
            logger.info("Task service ready (origins=%s)", settings.allowed_origins)
        yield
        # Shutdown
        if engine is not None:
            await close_db(engine)

    app = FastAPI(
        title="Task Board API",
        description="Kanban task board with an activity log and real-time change notifications",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.connections = connections
    app.state.task_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=settings.allowed_origins != ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(TaskBoardError)
    async def task_board_error_handler(request: Request, exc: TaskBoardError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        field = errors[0]["loc"][-1] if errors and errors[0].get("loc") else "body"
        return JSONResponse(status_code=400, content={"error": f"Invalid value for {field}"})

    app.include_router(tasks.router)
    app.include_router(activity.router)
    app.include_router(realtime.router)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {"message": "Task Board API", "version": VERSION, "status": "running"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "taskboard",
            "version": VERSION,
            "active_connections": len(app.state.connections),
        }

    return app


app = create_app()


def main():
    """Run the application with uvicorn"""
    import uvicorn

    settings = app.state.settings
    uvicorn.run(
        "taskboard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
