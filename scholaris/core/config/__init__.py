# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for Scholaris.

Example:
    >>> from scholaris.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from scholaris.core.config.settings import (
    APISettings,
    CORSSettings,
    DatabaseSettings,
    GenerationSettings,
    JWTSettings,
    LLMSettings,
    RateLimitSettings,
    SessionSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "LLMSettings",
    "GenerationSettings",
    "JWTSettings",
    "SessionSettings",
    "RateLimitSettings",
    "CORSSettings",
    "APISettings",
]
