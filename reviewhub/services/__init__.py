"""Domain services for review engagement and moderation.

Each service takes an explicit SQLAlchemy ``Session`` and flushes its
writes; committing is left to the caller.
"""

from . import categories, comments, moderation, profiles, reviews, votes
from .pagination import Page, PageMeta, PaginationParams, PaginationPolicy, resolve_pagination
from .principal import Actor

__all__ = [
    "Actor",
    "Page",
    "PageMeta",
    "PaginationParams",
    "PaginationPolicy",
    "categories",
    "comments",
    "moderation",
    "profiles",
    "resolve_pagination",
    "reviews",
    "votes",
]
