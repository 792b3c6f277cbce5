# File: localgov/main.py
# Project: my-local-gov-backend

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler

from localgov.core.config import cors_origins_list, settings
from localgov.core.ratelimit import limiter
from localgov.routers import auth, issues, address

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app = FastAPI(title="MyLocalGov API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True}

app.include_router(auth.router)
app.include_router(issues.router)
app.include_router(address.router)

app.mount(
    "/uploads",
    StaticFiles(directory=Path(settings.storage_root) / "uploads", check_dir=False),
    name="uploads",
)
