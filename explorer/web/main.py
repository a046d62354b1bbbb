"S3 Explorer local client"
from __future__ import annotations

from typing import List, Optional
import argparse
import logging
import os
import sys

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import ensure_secure_config_on_startup
from .components.layout import HTMX_ORIGIN
from .routes.auth import auth_router
from .routes.files import files_router
from .state import NO_STORE, SETTINGS


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via EXPLORER_ENABLE_DOTENV (default true).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("EXPLORER_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    from dotenv import load_dotenv

    load_dotenv()

logger = logging.getLogger("explorer.web")

# boto3/botocore are chatty at INFO (credential resolution, endpoint lookups).
for _name in ("boto3", "botocore", "s3transfer", "urllib3"):
    logging.getLogger(_name).setLevel(logging.WARNING)

ensure_secure_config_on_startup(SETTINGS.config, SETTINGS.environment)

app = FastAPI(title="S3 Explorer", description="Browse a private S3 bucket with federated sign-in", version=__version__)
app.include_router(auth_router)
app.include_router(files_router)


# --- Security Headers Middleware ----------------------------------------------

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault(
        "Content-Security-Policy",
        f"default-src 'self'; script-src 'self' {HTMX_ORIGIN}; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; form-action 'self'; frame-ancestors 'none';",
    )
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    return response


@app.get("/health")
async def health_check():
    return JSONResponse({"status": "ok"}, headers=NO_STORE)


def run(argv: Optional[List[str]] = None) -> None:
    """Console entry point: `s3-explorer serve [--host H] [--port P]`."""
    parser = argparse.ArgumentParser(prog="s3-explorer")
    sub = parser.add_subparsers(dest="command", required=True)
    serve = sub.add_parser("serve", help="run the local explorer client")
    serve.add_argument("--host", default=os.getenv("EXPLORER_HOST", "127.0.0.1"))
    serve.add_argument("--port", type=int, default=int(os.getenv("EXPLORER_PORT", "8000")))
    serve.add_argument("--log-level", default=os.getenv("EXPLORER_LOG_LEVEL", "info"))
    args = parser.parse_args(argv)

    import uvicorn

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Starting S3 Explorer on %s:%d (env=%s)", args.host, args.port, SETTINGS.environment)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    run()
