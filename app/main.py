import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables at the very beginning
load_dotenv()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402

from app.api import detection, system  # noqa: E402
from app.config import settings  # noqa: E402
from app.detection.factory import build_engine  # noqa: E402
from app.integrations import http_client, redis_client  # noqa: E402

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await http_client.initialize()
    redis_client.initialize()

    # Invalid weights abort startup here rather than on the first request
    app.state.engine = build_engine(settings)

    yield

    await http_client.close()
    logger.info("[SHUTDOWN] Detection service stopped")


app = FastAPI(title="AI Text Consensus Detection API", lifespan=lifespan)


# ---- Global Exception Handler for CORS ----
# HTTP errors (400 word limit, 429, 503) must carry CORS headers so the
# dashboard and extension can read the JSON body instead of a Network Error.
@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(getattr(exc, "headers", None) or {})
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Allow-Methods"] = "*"
    headers["Access-Control-Allow-Headers"] = "*"

    logger.info(f"[ERROR HANDLER] Returning {exc.status_code} to client. Body: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


# ---- CORS ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(detection.router)
