# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment submission domain package."""

from scholaris.domains.submission.service import (
    AlreadySubmittedError,
    AssignmentNotFoundError,
    DeadlinePassedError,
    SubmissionNotFoundError,
    SubmissionService,
    SubmissionServiceError,
)

__all__ = [
    "SubmissionService",
    "SubmissionServiceError",
    "AssignmentNotFoundError",
    "SubmissionNotFoundError",
    "DeadlinePassedError",
    "AlreadySubmittedError",
]
