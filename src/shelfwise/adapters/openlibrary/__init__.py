"""OpenLibrary metadata adapter."""

from __future__ import annotations

from .client import OpenLibraryAPIError, OpenLibraryClient
from .fetcher import OpenLibraryLookup

__all__ = ["OpenLibraryAPIError", "OpenLibraryClient", "OpenLibraryLookup"]
