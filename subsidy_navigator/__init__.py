"""Kanagawa Subsidy Navigator: AI-summarised subsidy listings."""

__version__ = "0.1.0"
