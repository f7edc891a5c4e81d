"""Rendering of Matrix chat messages onto an in-memory character-cell screen."""

__version__ = "0.1.0"