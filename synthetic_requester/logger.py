"""Shared loguru logger for the requester."""
from __future__ import annotations

from loguru import logger

__all__ = ["logger"]
