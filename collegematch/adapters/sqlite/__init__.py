"""
SQLite Adapter - College catalog persistence.
"""

from .repository import COLLEGE_FIELDS, CollegeRepository

__all__ = ["CollegeRepository", "COLLEGE_FIELDS"]
