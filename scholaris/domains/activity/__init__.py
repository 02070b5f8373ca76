# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Audit trail and notification domain package."""

from scholaris.domains.activity.service import ActivityRecorder, AuditAction

__all__ = [
    "ActivityRecorder",
    "AuditAction",
]
