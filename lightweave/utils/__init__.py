"""Async utilities shared across lightweave."""

from .future import FutureBatch

__all__ = ["FutureBatch"]
