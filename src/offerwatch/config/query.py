"""Defaults and limits for listing queries."""

from __future__ import annotations

from dataclasses import dataclass

from .env import positive_int_env

DEFAULT_MAX_FILTER_LENGTH = 2000
DEFAULT_PAGE_SIZE = 50
DEFAULT_MAX_PAGE_SIZE = 1000
DEFAULT_SORT = "createdAt desc"


@dataclass(frozen=True, slots=True)
class QueryConfig:
    max_filter_length: int = DEFAULT_MAX_FILTER_LENGTH
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE
    default_sort: str = DEFAULT_SORT


def get_query_config() -> QueryConfig:
    return QueryConfig(
        max_page_size=positive_int_env("OFFERWATCH_MAX_PAGE_SIZE", DEFAULT_MAX_PAGE_SIZE),
    )
