import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from radio_sync.domain.radio import NotAuthorizedError, RadioUnavailableError

app = FastAPI(title="radio-sync Web API", version="1.0.0")

# CORS: Allow environment override for production
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = (
    allowed_origins_env.split(",")
    if allowed_origins_env
    else ["http://localhost:5173"]  # Dev default
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotAuthorizedError)
async def not_authorized_handler(request: Request, exc: NotAuthorizedError) -> JSONResponse:
    logger.warning(f"Rejected admin request to {request.url.path}: {exc}")
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(RadioUnavailableError)
async def radio_unavailable_handler(
    request: Request, exc: RadioUnavailableError
) -> JSONResponse:
    logger.error(f"Radio unavailable for {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# Include routers
from web.backend.routers import radio

app.include_router(radio.router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
