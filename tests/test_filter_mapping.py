"""Tests for filter and sorter translation."""

import pytest

from folioscope.config.loader import FilterConfig
from folioscope.hydra.filter_mapping import (
    FieldKind,
    Filter,
    Sorter,
    build_query_string,
    map_filters,
    map_sorters,
    resolve_field,
    translate_filter,
)


def _f(field, operator, value):
    return {"field": field, "operator": operator, "value": value}


def test_eq_range_string_on_metric_field_maps_to_gte_and_lte():
    params = map_filters([_f("visScore", "eq", "10,50")])
    assert params == {"metric[visScore][gte]": "10", "metric[visScore][lte]": "50"}


def test_eq_range_string_on_indicator_field_uses_indicator_namespace():
    params = map_filters([_f("adx", "eq", "20,40")])
    assert params == {"indicator[adx][gte]": "20", "indicator[adx][lte]": "40"}


def test_eq_range_with_open_upper_end_only_sends_lower_bound():
    assert map_filters([_f("atrPercent", "eq", "5,")]) == {"indicator[atrPercent][gte]": "5"}


def test_eq_range_with_open_lower_end_only_sends_upper_bound():
    assert map_filters([_f("fintelScore", "eq", ",70")]) == {"metric[fintelScore][lte]": "70"}


def test_eq_scalar_on_metric_field_is_a_lower_bound():
    assert map_filters([_f("globalStars", "eq", 3)]) == {"metric[globalStars][gte]": 3}


def test_eq_on_bare_range_field_has_no_namespace():
    params = map_filters([_f("marketcap", "eq", "1000000,5000000")])
    assert params == {"marketcap[gte]": "1000000", "marketcap[lte]": "5000000"}


def test_eq_on_plain_field_is_exact_match():
    assert map_filters([_f("type", "eq", "crypto")]) == {"type": "crypto"}


def test_ne_maps_to_not():
    assert map_filters([_f("status", "ne", "closed")]) == {"status[not]": "closed"}


@pytest.mark.parametrize(
    "operator,expected_key",
    [
        ("lt", "amount[lt]"),
        ("gt", "amount[gt]"),
        ("lte", "amount[lte]"),
        ("gte", "amount[gte]"),
        ("after", "amount[gt]"),
        ("before", "amount[lt]"),
    ],
)
def test_comparison_operators_on_plain_fields(operator, expected_key):
    assert map_filters([_f("amount", operator, 12)]) == {expected_key: 12}


@pytest.mark.parametrize(
    "operator,expected_key",
    [
        ("lt", "arrival[before]"),
        ("lte", "arrival[before]"),
        ("before", "arrival[before]"),
        ("gt", "arrival[after]"),
        ("gte", "arrival[after]"),
        ("after", "arrival[after]"),
    ],
)
def test_comparison_operators_on_date_fields_use_before_after(operator, expected_key):
    assert map_filters([_f("arrival", operator, "2024-06-01")]) == {expected_key: "2024-06-01"}


def test_in_expands_to_array_parameter():
    assert map_filters([_f("countryCode", "in", ["FR", "DE"])]) == {"countryCode[]": ["FR", "DE"]}


def test_in_with_scalar_becomes_single_item_list():
    assert map_filters([_f("watchlist", "in", 4)]) == {"watchlist[]": [4]}


def test_in_on_tags_accumulates_across_filters():
    params = map_filters([_f("tags", "in", ["growth"]), _f("tags", "in", ["value", "dividend"])])
    assert params == {"tags[]": ["growth", "value", "dividend"]}


def test_scalar_in_on_tags_replaces_accumulated_list():
    params = map_filters([_f("tags", "in", ["growth", "value"]), _f("tags", "in", "dividend")])
    assert params == {"tags[]": ["dividend"]}


def test_in_on_other_fields_is_replaced_by_later_filter():
    params = map_filters([_f("countryCode", "in", ["FR"]), _f("countryCode", "in", ["US"])])
    assert params == {"countryCode[]": ["US"]}


def test_contains_is_a_bare_parameter():
    assert map_filters([_f("name", "contains", "apple")]) == {"name": "apple"}


def test_between_at_sentinel_omits_upper_bound():
    assert map_filters([_f("price", "between", [100, 50000])]) == {"price[gte]": 100}


def test_between_above_sentinel_omits_upper_bound():
    assert map_filters([_f("price", "between", [100, 75000])]) == {"price[gte]": 100}


def test_between_below_sentinel_keeps_upper_bound():
    params = map_filters([_f("price", "between", [100, 20000])])
    assert params == {"price[gte]": 100, "price[lte]": 20000}


def test_between_with_zero_minimum_omits_lower_bound():
    assert map_filters([_f("adults", "between", [0, 4])]) == {"adults[lte]": 4}


def test_between_full_sentinel_range_sends_nothing():
    assert map_filters([_f("duration", "between", [0, 49])]) == {}


def test_between_without_sentinel_keeps_both_bounds():
    params = map_filters([_f("amount", "between", [5, 999999])])
    assert params == {"amount[gte]": 5, "amount[lte]": 999999}


def test_between_with_non_numeric_max_on_sentinel_field_omits_upper_bound():
    assert map_filters([_f("price", "between", [10, "max"])]) == {"price[gte]": 10}


def test_between_on_date_field_uses_after_and_before():
    params = map_filters([_f("dateEnquiry", "between", ["2024-01-01", "2024-02-01"])])
    assert params == {"dateEnquiry[after]": "2024-01-01", "dateEnquiry[before]": "2024-02-01"}


@pytest.mark.parametrize("value", [[1], [1, 2, 3], "1,2", None])
def test_between_requires_two_element_list(value):
    assert map_filters([_f("price", "between", value)]) == {}


def test_unknown_operator_is_ignored():
    assert map_filters([_f("name", "startswith", "A"), _f("type", "eq", "fund")]) == {"type": "fund"}


def test_filters_without_field_are_skipped():
    group = {"operator": "or", "value": [_f("type", "eq", "fund")]}
    assert map_filters([group]) == {}


def test_accepts_filter_models():
    assert map_filters([Filter(field="type", operator="eq", value="stock")]) == {"type": "stock"}


def test_map_filters_handles_none():
    assert map_filters(None) == {}


def test_custom_tables_change_namespacing():
    config = FilterConfig(metric_fields=["yield"], sentinel_values={"yield": 10})
    params = map_filters([_f("yield", "between", [2, 10])], config)
    assert params == {"metric[yield][gte]": 2}


def test_resolve_field_classification():
    config = FilterConfig(metric_fields=["a"], indicator_fields=["b"], range_fields=["c"], date_fields=["d"])
    assert resolve_field("a", config).kind == FieldKind.METRIC
    assert resolve_field("b", config).key == "indicator[b]"
    assert resolve_field("c", config).key == "c"
    assert resolve_field("d", config).is_date is True
    assert resolve_field("zzz", config).kind == FieldKind.PLAIN


def test_translate_filter_returns_pairs():
    pairs = translate_filter(Filter(field="visScore", operator="eq", value="1,2"))
    assert pairs == [("metric[visScore][gte]", "1"), ("metric[visScore][lte]", "2")]


def test_map_sorters_renames_childs_and_defaults_to_asc():
    params = map_sorters([{"field": "childs", "order": "desc"}, Sorter(field="name", order=None)])
    assert params == {"order[children]": "desc", "order[name]": "asc"}


def test_map_sorters_empty():
    assert map_sorters([]) == {}
    assert map_sorters(None) == {}


def test_build_query_string_repeats_lists_and_skips_none():
    query = build_query_string({"a": [1, 2], "b": "x", "c": None})
    assert query == "?a=1&a=2&b=x"
    assert "None" not in query


def test_build_query_string_empty_map():
    assert build_query_string({}) == ""
    assert build_query_string({"a": None}) == ""


def test_build_query_string_encodes_brackets():
    assert build_query_string({"price[gte]": 10}) == "?price%5Bgte%5D=10"


def test_build_query_string_stringifies_like_a_browser():
    assert build_query_string({"active": True, "ratio": 10.0, "score": 2.5}) == "?active=true&ratio=10&score=2.5"


def test_build_query_string_skips_none_list_members():
    assert build_query_string({"ids[]": [1, None, 3]}) == "?ids%5B%5D=1&ids%5B%5D=3"
