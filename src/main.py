import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from api.api_v1.api import api_router
from core.config import settings
from core.db import init_db
from core.errors import ProtocolError
from log import setup_logging_to_console, setup_seq_logging

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME, openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    init_db()


@app.exception_handler(ProtocolError)
async def protocol_exception_handler(request: Request, exc: ProtocolError):
    return JSONResponse(
        status_code=400,
        content={
            "error": exc.error_code,
            "message": exc.error_message,
        },
    )


@app.exception_handler(Exception)
async def exception_handler(request: Request, exc: Exception):
    logger.error("unhandled error on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": str(exc)},
    )


app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    setup_logging_to_console(level=settings.LOG_LEVEL)
    setup_seq_logging(level=settings.LOG_LEVEL)
    uvicorn.run(app, host="0.0.0.0", port=8001)
