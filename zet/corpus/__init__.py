"""Corpus access, navigation and link parsing utilities."""

from .navigator import Navigator
from .parser import (
    extract_links,
    filter_direct_branches,
    format_link,
    rewrite_branch_links,
    rewrite_exact_links,
    set_header_id,
)
from .store import Corpus

__all__ = [
    "Corpus",
    "Navigator",
    "extract_links",
    "filter_direct_branches",
    "format_link",
    "rewrite_branch_links",
    "rewrite_exact_links",
    "set_header_id",
]
