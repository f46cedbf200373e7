import logging
import os
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

load_dotenv()

from weekly_reports.routes import (
    weeks_router,
    org_units_router,
    reports_router,
    issues_router,
)
from weekly_reports.database import init_db, DATABASE_URL
from weekly_reports.errors import (
    DateError,
    ParseError,
    ResolutionError,
    StorageError,
    WeekLockedError,
    InvalidTransitionError,
    IssueLockedError,
    IssueNotFoundError,
    ReportNotFoundError,
)

# Setup logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Weekly Reports",
    description="Weekly business unit activity reports",
    version="1.0.0"
)

# Include routers
app.include_router(weeks_router)
app.include_router(org_units_router)
app.include_router(reports_router)
app.include_router(issues_router)


@app.on_event("startup")
def on_startup():
    """Ensure DB is reachable and initialized at startup. If initialization
    fails the app will raise and stop with a clear error message.
    """
    try:
        init_db()
    except Exception as e:
        # Re-raise as RuntimeError so the server fails loudly
        raise RuntimeError(
            f"Database initialization failed for DATABASE_URL={DATABASE_URL}: {e}"
        ) from e


def _error(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": error, "detail": str(exc)}, status_code=status_code)


# Error handlers
@app.exception_handler(DateError)
async def date_error_handler(request: Request, exc: DateError):
    return _error(400, "Invalid date", exc)


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    return _error(400, "Invalid week selection", exc)


@app.exception_handler(ResolutionError)
async def resolution_error_handler(request: Request, exc: ResolutionError):
    return _error(422, "Unknown business unit or division", exc)


@app.exception_handler(ValueError)
async def validation_error_handler(request: Request, exc: ValueError):
    return _error(422, "Invalid submission", exc)


@app.exception_handler(WeekLockedError)
async def week_locked_handler(request: Request, exc: WeekLockedError):
    return _error(409, "Week is locked", exc)


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return _error(409, "Invalid status change", exc)


@app.exception_handler(IssueLockedError)
async def issue_locked_handler(request: Request, exc: IssueLockedError):
    return _error(409, "Issue cannot be removed", exc)


@app.exception_handler(IssueNotFoundError)
async def issue_not_found_handler(request: Request, exc: IssueNotFoundError):
    return _error(404, "Issue not found", exc)


@app.exception_handler(ReportNotFoundError)
async def report_not_found_handler(request: Request, exc: ReportNotFoundError):
    return _error(404, "Report not found", exc)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return _error(503, "Failed to load/save, try again", exc)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
