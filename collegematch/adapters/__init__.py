"""
Adapters - External storage integrations.

Storage access is wrapped here to keep the search domain free of I/O.
"""

from .catalog_file import load_corpus_file, read_catalog_rows
from .sqlite import CollegeRepository

__all__ = [
    "CollegeRepository",
    "load_corpus_file",
    "read_catalog_rows",
]
