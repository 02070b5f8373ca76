# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LLM client package.

Example:
    >>> from scholaris.core.intelligence.llm import LLMClient
    >>> client = LLMClient()
    >>> response = await client.complete("Outline a 12 week biology course")
"""

from scholaris.core.intelligence.llm.client import LLMClient, LLMError, LLMResponse

__all__ = [
    "LLMClient",
    "LLMError",
    "LLMResponse",
]
