# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ASGI entry point.

Run with uvicorn:
    uvicorn scholaris.main:app

Or as a module:
    python -m scholaris
"""

import uvicorn

from scholaris.api.app import create_app
from scholaris.core.config import get_settings

app = create_app()


def run() -> None:
    """Start the API server using APISettings."""
    settings = get_settings()
    uvicorn.run(
        "scholaris.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        reload=settings.api.reload,
        log_config=None,
    )
