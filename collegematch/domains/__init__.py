"""
Domains - Search logic with no I/O.

search/ holds the whole matching pipeline: normalization, matcher
strategies, fusion and ranking, the result cache and query policy.
Catalog storage lives in collegematch.adapters.
"""

__all__ = ["search"]
