import logging
import os
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from app.api.upload import router as upload_router
from app.core.config import UploaderSettings
from app.domain.errors import UploaderError

# Configure logging
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

_APP_DIR = Path(__file__).resolve().parent


app = FastAPI(
    title="GitHub Uploader",
    version="0.1.0",
    description="Upload files from the browser into a GitHub repository and keep an index of them.",
)


# Static files (CSS, JS)
app.mount("/static", StaticFiles(directory=_APP_DIR / "static"), name="static")

# HTML templates (Jinja2)
templates = Jinja2Templates(directory=_APP_DIR / "templates")


@app.exception_handler(UploaderError)
async def uploader_error_handler(request: Request, exc: UploaderError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.response_message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.on_event("startup")
async def startup_event() -> None:
    """
    Report the upload target, or which settings are still missing.
    Missing settings do not stop the server; uploads answer 500 until fixed.
    """
    settings = UploaderSettings.from_env()
    missing = settings.missing()
    if missing:
        logger.warning(f"Uploads disabled until these are set: {', '.join(missing)}")
    else:
        logger.info(f"Uploading to {settings.repository}@{settings.branch}")


@app.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    """
    Upload page.
    """
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": "GitHub Uploader",
            "max_upload_mb": UploaderSettings.from_env().max_upload_bytes // (1024 * 1024),
        },
    )


@app.get("/health")
async def health() -> dict:
    """
    Lightweight health check endpoint.
    """
    return {"status": "ok"}


app.include_router(upload_router, prefix="/api", tags=["upload"])


if __name__ == "__main__":
    """
    Allow running `python app/main.py` to start the Uvicorn development server.
    """
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
