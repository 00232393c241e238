from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intake_agent.routes import health, search
from intake_agent.logging.flight_recorder import register_log_middleware


def create_app() -> FastAPI:
    app = FastAPI(title="Space Intake Agent", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_log_middleware(app)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(search.router, tags=["search"])

    return app


app = create_app()
