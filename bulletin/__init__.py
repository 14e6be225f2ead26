"""
Bulletin Service Application Package.

Short messages between email addresses, created once and retrieved
through paged, filterable, streamed queries.
"""

__version__ = "1.0.0"
__description__ = "Message bulletin service with streamed paged queries"
