"""Infra layer utilities."""

from .storage import SQLiteManager

__all__ = ["SQLiteManager"]
