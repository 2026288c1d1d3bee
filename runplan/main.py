"""FastAPI application entry point."""
from fastapi import FastAPI

from runplan.routers import health, training_plans


app = FastAPI(title="Training Plan Compiler API")


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(health.router)
app.include_router(training_plans.router)


if __name__ == "__main__":
    import uvicorn

    from runplan.config import get_settings
    from runplan.logging_config import configure_logging

    configure_logging()
    settings = get_settings()
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
