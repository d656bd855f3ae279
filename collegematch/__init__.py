"""
CollegeMatch - Multi-strategy fuzzy search for medical/dental college catalogs.

Example:
    >>> from collegematch.domains.search import CollegeSearchEngine
    >>> engine = CollegeSearchEngine()
    >>> results = await engine.search("a.j", corpus, options={"abbreviation": True})
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
