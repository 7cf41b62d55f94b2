# Overview: Generation of record identifiers for workbook rows.

from __future__ import annotations

import secrets


ID_BYTES = 16


def new_id() -> str:
    """URL-safe random id (22 chars). Collisions are not checked."""
    return secrets.token_urlsafe(ID_BYTES)
