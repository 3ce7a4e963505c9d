"""Hydra API layer: transport, normalization, query mapping and caching.

Callers should import from here rather than from the submodules.
"""

from .cache import CacheService, cache_service
from .filter_mapping import (
    Filter,
    FilterOperator,
    Sorter,
    build_query_string,
    map_filters,
    map_sorters,
)
from .http_client import HttpResponse, HydraHttpClient, HydraHttpError
from .normalizers import (
    extract_items_from_hydra_response,
    extract_total_from_hydra_response,
    normalize,
    process_enquiry_data,
)

__all__ = [
    "CacheService",
    "Filter",
    "FilterOperator",
    "HttpResponse",
    "HydraHttpClient",
    "HydraHttpError",
    "Sorter",
    "build_query_string",
    "cache_service",
    "extract_items_from_hydra_response",
    "extract_total_from_hydra_response",
    "map_filters",
    "map_sorters",
    "normalize",
    "process_enquiry_data",
]
