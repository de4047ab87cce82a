"""Stateless, resumable sitemap cache warmer."""

__version__ = "0.1.0"
