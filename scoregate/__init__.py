# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Score Gate: authorization, schedule gating and score derivation.

Decides, for every score-record mutation, whether the requesting teacher is
permitted to perform it right now, and derives the record key and weighted
average before delegating to storage.
"""

__version__ = "0.1.0"
