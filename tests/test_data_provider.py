"""Tests for the resource-level data provider."""

import json

from folioscope.hydra.data_provider import HydraDataProvider, get_endpoint
from folioscope.hydra.filter_mapping import Filter, Sorter

from conftest import API_URL, make_response


def test_get_endpoint_maps_asset_views():
    assert get_endpoint("crypto") == "assets"
    assert get_endpoint("indexes") == "assets"
    assert get_endpoint("wallets") == "wallets"


def test_get_list_builds_query_and_normalizes(client, fake_http):
    fake_http.responses.append(make_response(200, {
        "member": [{"@id": "/api/assets/1", "symbol": "BTC"}, {"@id": "/api/assets/2", "symbol": "ETH"}],
        "totalItems": 57,
    }))
    provider = HydraDataProvider(client)

    result = provider.get_list(
        "crypto",
        filters=[Filter(field="type", operator="eq", value="crypto"), {"field": "adx", "operator": "eq", "value": "20,"}],
        sorters=[Sorter(field="name", order="asc")],
        page=2,
        page_size=20,
    )

    assert fake_http.calls[0].url == (
        f"{API_URL}/assets?type=crypto&indicator%5Badx%5D%5Bgte%5D=20"
        "&order%5Bname%5D=asc&page=2&itemsPerPage=20"
    )
    assert [r["id"] for r in result.data] == ["1", "2"]
    assert result.total == 57


def test_get_list_defaults_to_first_page_of_ten(client, fake_http):
    fake_http.responses.append(make_response(200, {"member": []}))
    HydraDataProvider(client).get_list("wallets")
    assert fake_http.calls[0].url == f"{API_URL}/wallets?page=1&itemsPerPage=10"


def test_get_list_total_falls_back_to_page_length(client, fake_http):
    fake_http.responses.append(make_response(200, [{"id": 1}, {"id": 2}]))
    result = HydraDataProvider(client).get_list("wallets")
    assert result.total == 2


def test_get_list_processes_enquiries(client, fake_http):
    fake_http.responses.append(make_response(200, {"member": [{"id": 9, "internalMemo": "[]"}], "totalItems": 1}))
    result = HydraDataProvider(client).get_list("enquiries")
    assert result.data[0]["internalMemo"] == []


def test_get_one_and_get_many(client, fake_http):
    fake_http.responses.extend([
        make_response(200, {"@id": "/api/wallets/3", "name": "PEA"}),
        make_response(200, {"@id": "/api/wallets/4", "name": "CTO"}),
        make_response(200, {"@id": "/api/wallets/5", "name": "PER"}),
    ])
    provider = HydraDataProvider(client)

    assert provider.get_one("wallets", 3)["id"] == "3"
    many = provider.get_many("wallets", [4, 5])

    assert [r["name"] for r in many] == ["CTO", "PER"]
    assert [c.url for c in fake_http.calls[1:]] == [f"{API_URL}/wallets/4", f"{API_URL}/wallets/5"]


def test_create_returns_body_of_201(client, fake_http):
    fake_http.responses.append(make_response(201, {"@id": "/api/watchlists/8", "name": "Tech"}))
    created = HydraDataProvider(client).create("watchlists", {"name": "Tech"})

    call = fake_http.calls[0]
    assert call.method == "POST"
    assert call.headers["Content-Type"] == "application/ld+json"
    assert json.loads(call.data) == {"name": "Tech"}
    assert created["id"] == "8"


def test_create_follows_location_header(client, fake_http):
    fake_http.responses.extend([
        make_response(201, None, headers={"Location": f"{API_URL}/watchlists/8"}),
        make_response(200, {"@id": "/api/watchlists/8", "name": "Tech"}),
    ])
    created = HydraDataProvider(client).create("watchlists", {"name": "Tech"})

    assert fake_http.calls[1].url == f"{API_URL}/watchlists/8"
    assert created == {"id": "8", "@id": "/api/watchlists/8", "name": "Tech"}


def test_create_resolves_relative_location_against_host(client, fake_http):
    fake_http.responses.extend([
        make_response(201, None, headers={"Location": "/api/wallets/5"}),
        make_response(200, {"@id": "/api/wallets/5", "name": "PEA"}),
    ])
    created = HydraDataProvider(client).create("wallets", {"name": "PEA"})

    assert fake_http.calls[1].url == f"{API_URL}/wallets/5"
    assert created["id"] == "5"


def test_update_uses_merge_patch(client, fake_http):
    fake_http.responses.append(make_response(200, {"id": 3, "name": "Renamed"}))
    updated = HydraDataProvider(client).update("wallets", 3, {"name": "Renamed"})

    call = fake_http.calls[0]
    assert call.method == "PATCH"
    assert call.url == f"{API_URL}/wallets/3"
    assert call.headers["Content-Type"] == "application/merge-patch+json"
    assert updated["name"] == "Renamed"


def test_delete_one_returns_id(client, fake_http):
    fake_http.responses.append(make_response(204, None))
    assert HydraDataProvider(client).delete_one("asset_notes", 12) == {"id": 12}
    assert fake_http.calls[0].method == "DELETE"


def test_get_api_url(client):
    assert HydraDataProvider(client).get_api_url() == API_URL
