"""Google Books metadata adapter."""

from __future__ import annotations

from .client import GoogleBooksAPIError, GoogleBooksClient
from .fetcher import GoogleBooksLookup

__all__ = ["GoogleBooksAPIError", "GoogleBooksClient", "GoogleBooksLookup"]
