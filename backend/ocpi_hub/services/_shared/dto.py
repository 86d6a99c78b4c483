# comments in English; reST docstrings strict
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PaginationIn:
    """
    Input pagination contract (offset based).

    :param offset: Number of entries to skip (>= 0).
    :type offset: int
    :param limit: Page size (> 0).
    :type limit: int
    """

    offset: int = 0
    limit: int = 50


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Output pagination metadata.

    :param offset: Number of skipped entries.
    :type offset: int
    :param limit: Page size.
    :type limit: int
    :param total: Total rows available.
    :type total: int
    :param has_next: Whether entries exist past this page.
    :type has_next: bool
    """

    offset: int
    limit: int
    total: int
    has_next: bool
