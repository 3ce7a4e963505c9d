"""CRUD data provider over the Hydra API (list/show/create/edit/delete)."""

from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import urljoin

from pydantic import BaseModel

from folioscope.config.loader import FilterConfig, default_filter_config
from folioscope.hydra.filter_mapping import Filter, Sorter, build_query_string, map_filters, map_sorters
from folioscope.hydra.http_client import HydraHttpClient
from folioscope.hydra.normalizers import (
    extract_items_from_hydra_response,
    extract_total_from_hydra_response,
    normalize,
    process_enquiry_data,
)
from folioscope.utils.logging import get_logger

logger = get_logger(__name__)

# Dashboard resources served by a shared API endpoint
RESOURCE_ENDPOINT_MAP: Dict[str, str] = {
    "funds": "assets",
    "forex": "assets",
    "crypto": "assets",
    "indexes": "assets",
}

DEFAULT_PAGE_SIZE = 10


class ListResult(BaseModel):
    data: List[Dict[str, Any]]
    total: int


def get_endpoint(resource: str) -> str:
    return RESOURCE_ENDPOINT_MAP.get(resource, resource)


class HydraDataProvider:
    """Resource-level operations used by the list/create/edit/show views."""

    def __init__(self, client: HydraHttpClient, filter_config: Optional[FilterConfig] = None):
        self.client = client
        self.filter_config = filter_config or default_filter_config()

    def get_api_url(self) -> str:
        return self.client.base_url

    def _normalize_for(self, resource: str, item: Any) -> Dict[str, Any]:
        if not isinstance(item, dict):
            return {"id": item}
        if resource == "enquiries":
            return process_enquiry_data(item)
        return normalize(item)

    def get_list(
        self,
        resource: str,
        filters: Optional[Iterable[Union[Filter, Dict[str, Any]]]] = None,
        sorters: Optional[Iterable[Union[Sorter, Dict[str, Any]]]] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> ListResult:
        """
        Fetch one page of a collection.

        Args:
            resource: Dashboard resource name (e.g. "crypto", "wallets")
            filters: Filters translated with ``map_filters``
            sorters: Sorters translated with ``map_sorters``
            page: 1-based page number
            page_size: Items per page

        Returns:
            ListResult with normalized items and the collection total
        """
        params: Dict[str, Any] = {
            **map_filters(filters, self.filter_config),
            **map_sorters(sorters),
        }
        params["page"] = page
        params["itemsPerPage"] = page_size

        endpoint = get_endpoint(resource)
        response = self.client.http(f"/{endpoint}{build_query_string(params)}")

        items = [self._normalize_for(resource, item) for item in extract_items_from_hydra_response(response.data)]
        total = extract_total_from_hydra_response(response.data, len(items))
        logger.debug(f"Listed {len(items)}/{total} {resource}")
        return ListResult(data=items, total=total)

    def get_one(self, resource: str, record_id: Any) -> Dict[str, Any]:
        response = self.client.http(f"/{get_endpoint(resource)}/{record_id}")
        return normalize(response.data)

    def get_many(self, resource: str, ids: Iterable[Any]) -> List[Dict[str, Any]]:
        """Fetch several records one request at a time, in ``ids`` order."""
        return [self.get_one(resource, record_id) for record_id in ids]

    def create(self, resource: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a record.

        A 201 with a body is returned directly; otherwise the ``Location``
        header is followed to load the created record.
        """
        endpoint = get_endpoint(resource)
        response = self.client.http(
            f"/{endpoint}",
            "POST",
            json_body=variables,
            headers={"Content-Type": "application/ld+json"},
        )

        if response.status == 201 and isinstance(response.data, dict) and response.data:
            return normalize(response.data)

        location = response.header("Location")
        if location:
            created = self.client.http(urljoin(f"{self.client.base_url}/", location))
            return normalize(created.data)

        data = response.data if isinstance(response.data, dict) else {}
        return normalize(data)

    def update(self, resource: str, record_id: Any, variables: Dict[str, Any]) -> Dict[str, Any]:
        response = self.client.http(
            f"/{get_endpoint(resource)}/{record_id}",
            "PATCH",
            json_body=variables,
            headers={"Content-Type": "application/merge-patch+json"},
        )
        return normalize(response.data)

    def delete_one(self, resource: str, record_id: Any) -> Dict[str, Any]:
        self.client.http(f"/{get_endpoint(resource)}/{record_id}", "DELETE")
        return {"id": record_id}
