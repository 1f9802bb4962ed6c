"""
FastAPI application for quiz signup verification.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.handlers import (
    general_exception_handler,
    http_exception_handler,
    signup_exception_handler,
    validation_exception_handler,
)
from api.signup import router as signup_router
from config import Config
from signup.config import SignupConfig
from signup.exceptions import SignupException

# Validate configuration on startup
Config.validate()

logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown."""
    if SignupConfig.SIGNUP_STORE == "sql":
        from db.engine import init_db

        init_db()
        logger.info("Signup tables ready")
    yield


app = FastAPI(
    title="Quiz Signup API",
    description="Email verification for new quiz accounts",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(SignupException, signup_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(signup_router, prefix="/api/v1/signup", tags=["signup"])


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}
