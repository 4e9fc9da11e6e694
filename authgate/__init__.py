# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Credential-issuance service: register, log in and validate RS256 bearer tokens."""

__version__ = "0.1.0"
