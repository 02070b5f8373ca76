# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for Scholaris.

This package contains the shared building blocks:
- config: Application configuration and settings
- intelligence: LLM client
- generation: Prompt building and AI response parsing
"""
