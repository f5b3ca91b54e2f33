import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.endpoints import admin, auth, drafts, qa, submissions
from app.config import get_settings
from app.errors import PortalError, UpstreamError
from app.services.file_service import ensure_upload_dir

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.record_store == "sql":
        from app.database import init_db

        init_db()
    yield


app = FastAPI(title="Vendor RFP Portal API", version="0.1.0", lifespan=lifespan)

# Serve uploaded NDA and pricing documents at /static/<folder>/<file>
app.mount("/static", StaticFiles(directory=str(ensure_upload_dir(settings.upload_dir))), name="static")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(drafts.router)
app.include_router(submissions.router)
app.include_router(qa.router)
app.include_router(admin.router)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
    hide = get_settings().is_production and (isinstance(exc, UpstreamError) or exc.status_code >= 500)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(hide_details=hide))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    details = "Something went wrong" if get_settings().is_production else str(exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # Unrouted /api paths get a JSON 404; a known path with the wrong method keeps its 405
    if exc.status_code == 404 and request.url.path.startswith("/api/"):
        return JSONResponse(status_code=404, content={"error": "API endpoint not found", "path": request.url.path})
    return await http_exception_handler(request, exc)


@app.get("/health")
def health():
    """Health check endpoint for load balancers and readiness probes."""
    return {
        "status": "ok",
        "service": "rfp-portal-backend",
        "record_store": get_settings().record_store,
    }
