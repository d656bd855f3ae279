"""
CLI Interface - Command-line tools for CollegeMatch.

Provides commands for:
- Catalog searches
- Catalog seeding
- Running the API server
"""

from .main import app, main

__all__ = ["app", "main"]
