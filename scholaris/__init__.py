"""Scholaris Backend.

School management platform covering courses, enrollment, assignments,
quizzes and grading, with AI-assisted study plan and quiz generation.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
