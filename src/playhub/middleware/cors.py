"""CORS for the web client and Expo dev servers."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from playhub.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured origins plus, when set, any origin matching ``cors_origin_regex``.

    The regex covers Expo dev servers, whose LAN address changes between runs.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id", "Retry-After", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
