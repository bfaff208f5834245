# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher assignment domain package.

This package provides:
- AssignmentIndex: read-only grant lookups
- AuthorizationResolver: class, subject and student access decisions
- AssignmentService: granting and ending assignments
"""

from scoregate.domains.assignment.index import AssignmentIndex
from scoregate.domains.assignment.resolver import AuthorizationResolver
from scoregate.domains.assignment.service import AssignmentService

__all__ = [
    "AssignmentIndex",
    "AuthorizationResolver",
    "AssignmentService",
]
