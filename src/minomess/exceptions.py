"""Minomess exception classes."""

from __future__ import annotations


class MinomessError(Exception):
    """Base exception for all Minomess errors."""


class MinomessDecodingError(MinomessError, ValueError):
    """Malformed field payload (non-hex characters, broken key, invalid date)."""


class MinomessScaleError(MinomessError, ValueError):
    """Scale factor is zero, negative or not finite."""


class MinomessRegistryError(MinomessError):
    """Driver registration or lookup failed."""
