"""User role tags stored with each account."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    """Account roles fixed at registration time."""

    CLIENT = "client"
    OWNER = "owner"
