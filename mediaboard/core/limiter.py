from __future__ import annotations

"""
Mediaboard — HTTP Rate Limiting (SlowAPI)
=========================================

Highlights
----------
- Per-client-IP keying (X-Forwarded-For / X-Real-IP / client.host).
- Health probes and static image paths are exempt.
- **Test/CI friendly**:
    - `RATE_LIMIT_NAMESPACE`: prefixes keys so parallel runs don't collide.
    - `RATE_LIMIT_TEST_BYPASS`: disables limits when truthy.
- In-memory storage unless `RATELIMIT_STORAGE_URI` points somewhere else.

Environment
-----------
RATE_LIMIT_ENABLED           default: "true"
DEFAULT_RATE_LIMIT           default: "120/minute"
WRITE_RATE_LIMIT             default: "30/minute"  (create/update/delete routes)
RATELIMIT_STORAGE_URI        default: "memory://"
RATE_LIMIT_SKIP_PATHS        default: "/healthz,/readyz,/docs,/openapi.json,/images/"
RATE_LIMIT_NAMESPACE         default: ""
RATE_LIMIT_TEST_BYPASS       default: ""

Usage
-----
    from mediaboard.core.limiter import install_rate_limiter, rate_limit

    @router.get("")
    @rate_limit()
    async def list_movies(request: Request, response: Response): ...

Decorated endpoints must accept `request: Request` and `response: Response`
so SlowAPI can read the client and inject `X-RateLimit-*` headers.
"""

import os
from typing import Callable, List, Optional

from dotenv import load_dotenv
from loguru import logger
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request

# ──────────────────────────────────────────────────────────────
# ⚙️ Environment & defaults
# ──────────────────────────────────────────────────────────────
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").strip().lower() == "true"
DEFAULT_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "120/minute").strip()
WRITE_LIMIT = os.getenv("WRITE_RATE_LIMIT", "30/minute").strip()
STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "").strip() or "memory://"

SKIP_PATHS: List[str] = [
    p.strip()
    for p in os.getenv(
        "RATE_LIMIT_SKIP_PATHS",
        "/healthz,/readyz,/docs,/openapi.json,/images/",
    ).split(",")
    if p.strip()
]

NAMESPACE = os.getenv("RATE_LIMIT_NAMESPACE", "").strip()


# ──────────────────────────────────────────────────────────────
# 🧠 Keying & exemptions
# ──────────────────────────────────────────────────────────────
def _client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        ip = xff.split(",")[0].strip()
        if ip:
            return ip
    xri = request.headers.get("x-real-ip")
    if xri:
        return xri.strip()
    return get_remote_address(request) or "unknown"


def get_rate_limit_key(request: Request) -> str:
    """`ip:<addr>`, prefixed with RATE_LIMIT_NAMESPACE when set."""
    key = f"ip:{_client_ip(request)}"
    return f"{NAMESPACE}:{key}" if NAMESPACE else key


def _path_is_skipped(path: str) -> bool:
    for prefix in SKIP_PATHS:
        if prefix.endswith("/"):
            if path.startswith(prefix):
                return True
        elif path == prefix:
            return True
    return False


def should_exempt_request(request: Optional[Request]) -> bool:
    """
    Exempt a request when the global switch is off, the path is skipped,
    or the test bypass is on.
    """
    # Re-read env at request time so tests can toggle without re-importing.
    if os.getenv("RATE_LIMIT_ENABLED", "true").strip().lower() != "true":
        return True
    if os.getenv("RATE_LIMIT_TEST_BYPASS", "").strip().lower() in _TRUTHY:
        return True
    if request is None:
        return False
    return _path_is_skipped(request.url.path)


def _exempt_when(request: Optional[Request] = None) -> bool:
    # SlowAPI passes the Request to one-parameter exempt_when callables,
    # so keep exactly one parameter or skip paths stop applying.
    return should_exempt_request(request)


# ──────────────────────────────────────────────────────────────
# 🧰 Limiter instance
# ──────────────────────────────────────────────────────────────
def _split_limits(value: str) -> List[str]:
    return [chunk.strip() for chunk in value.split(",") if chunk.strip()]


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=_split_limits(DEFAULT_LIMIT),
    headers_enabled=True,
    storage_uri=STORAGE_URI,
)

logger.info(
    "RateLimiter ready | enabled={} | default={} | storage={} | skip={} | ns={}",
    RATE_LIMIT_ENABLED, DEFAULT_LIMIT, STORAGE_URI, SKIP_PATHS, NAMESPACE,
)


# ──────────────────────────────────────────────────────────────
# 🎛 Decorators
# ──────────────────────────────────────────────────────────────
def _chain(decorators: List[Callable]) -> Callable:
    def _apply(fn: Callable) -> Callable:
        for deco in reversed(decorators):
            fn = deco(fn)
        return fn
    return _apply


def rate_limit(*limits: str) -> Callable:
    """
    Apply per-route limits with the standard exemptions.

    Examples
    --------
    @rate_limit()                 # DEFAULT_RATE_LIMIT
    @rate_limit(WRITE_LIMIT)
    @rate_limit("5/second", "100/minute")
    """
    selected = list(limits) if limits else _split_limits(DEFAULT_LIMIT)
    return _chain([limiter.limit(value, exempt_when=_exempt_when) for value in selected])


def rate_limit_exempt() -> Callable:
    """Explicitly exempt a route from limiting."""
    return limiter.exempt


# ──────────────────────────────────────────────────────────────
# 🔧 Installer
# ──────────────────────────────────────────────────────────────
def install_rate_limiter(app) -> None:
    """Attach SlowAPI middleware unless RATE_LIMIT_ENABLED is off."""
    app.state.limiter = limiter
    if not RATE_LIMIT_ENABLED:
        logger.info("RateLimiter disabled by env; middleware not installed")
        return
    app.add_middleware(SlowAPIMiddleware)
    logger.info("SlowAPI middleware installed")


__all__ = [
    "limiter",
    "rate_limit",
    "rate_limit_exempt",
    "install_rate_limiter",
    "should_exempt_request",
    "get_rate_limit_key",
    "WRITE_LIMIT",
]
