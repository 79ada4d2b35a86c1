"""
Query log session mining pipeline.

Cleans raw search-engine query logs, segments each user's activity into
time-gap sessions and provides a composite query distance for downstream
session-based reformulation and clustering studies.
"""

__version__ = "0.1.0"
