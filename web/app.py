"""FastAPI application for Runboard."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from metrics.exceptions import ValidationError
from metrics.store import RunStore


def default_settings() -> dict:
    """User-provided settings; None means 'estimate or use the default'."""
    return {
        "boundaries": None,
        "hr_max": None,
        "ftp": None,
        "weight_kg": None,
        "resting_hr": None,
    }


# Create FastAPI app
app = FastAPI(
    title="Runboard",
    description="Training metrics for your running and riding data",
)

# In-memory state, one store per process
app.state.store = RunStore()
app.state.records = {}
app.state.settings = default_settings()


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    """Invalid configuration is a client error, reported with the offending values."""
    return JSONResponse(
        content={"error": exc.message, "values": exc.values},
        status_code=422,
    )


@app.get("/")
async def index():
    return {
        "name": "Runboard",
        "runs": len(app.state.store),
        "records": len(app.state.records),
    }


# Import and include routers after app is created
from web.routes import runs, analysis, activities, settings

app.include_router(runs.router, tags=["runs"])
app.include_router(analysis.router, prefix="/analysis", tags=["analysis"])
app.include_router(activities.router, prefix="/activities", tags=["activities"])
app.include_router(settings.router, prefix="/settings", tags=["settings"])
