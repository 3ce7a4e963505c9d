"""Translate dashboard filters and sorters into Hydra collection query parameters.

The remote API understands bracketed filter keys (``price[gte]``,
``countryCode[]``, ``order[name]``) and namespaces screener metrics and
technical indicators (``metric[visScore][gte]``, ``indicator[adx][lte]``).
Each operator is a pure function returning ``(param, value)`` pairs;
``map_filters`` folds those pairs into a flat parameter map.
"""

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union
from urllib.parse import urlencode

from pydantic import BaseModel

from folioscope.config.loader import FilterConfig, default_filter_config
from folioscope.utils.logging import get_logger

logger = get_logger(__name__)

ParamPairs = List[Tuple[str, Any]]

# Fields whose list-valued "in" filters accumulate; a scalar value replaces the list
ACCUMULATING_FIELDS = ("tags",)

RENAMED_SORT_FIELDS = {"childs": "children"}


class FilterOperator(str, Enum):
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    GT = "gt"
    LTE = "lte"
    GTE = "gte"
    IN = "in"
    CONTAINS = "contains"
    BETWEEN = "between"
    AFTER = "after"
    BEFORE = "before"


class FieldKind(str, Enum):
    PLAIN = "plain"
    METRIC = "metric"
    INDICATOR = "indicator"
    RANGE = "range"


class Filter(BaseModel):
    field: str
    operator: str
    value: Any = None


class Sorter(BaseModel):
    field: str
    order: Optional[str] = "asc"


class ResolvedField(BaseModel):
    """A filter field with its outgoing key and classification."""

    field: str
    key: str
    kind: FieldKind
    is_date: bool = False

    @property
    def is_numeric_range(self) -> bool:
        return self.kind in (FieldKind.METRIC, FieldKind.INDICATOR, FieldKind.RANGE)


def resolve_field(field: str, config: FilterConfig) -> ResolvedField:
    """
    Resolve the query key prefix for a filter field.

    Args:
        field: Field name as used by the dashboard
        config: Translator tables

    Returns:
        ResolvedField with ``key`` set to ``metric[field]``,
        ``indicator[field]`` or the bare field name
    """
    is_date = field in config.date_fields
    if field in config.metric_fields:
        return ResolvedField(field=field, key=f"metric[{field}]", kind=FieldKind.METRIC, is_date=is_date)
    if field in config.indicator_fields:
        return ResolvedField(field=field, key=f"indicator[{field}]", kind=FieldKind.INDICATOR, is_date=is_date)
    if field in config.range_fields:
        return ResolvedField(field=field, key=field, kind=FieldKind.RANGE, is_date=is_date)
    return ResolvedField(field=field, key=field, kind=FieldKind.PLAIN, is_date=is_date)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _upper_bound_pairs(target: ResolvedField, max_value: Any, config: FilterConfig) -> ParamPairs:
    """``[lte]`` pair unless ``max_value`` is not a number below the field's sentinel ceiling."""
    if _is_blank(max_value):
        return []
    sentinel = config.sentinel_values.get(target.field)
    numeric_max = _as_number(max_value)
    if sentinel is not None and (numeric_max is None or numeric_max >= sentinel):
        return []
    return [(f"{target.key}[lte]", max_value)]


def _split_range(value: Any) -> Optional[Tuple[Any, Any]]:
    """Split ``"min,max"`` (either side may be empty) or a two-element list."""
    if isinstance(value, (list, tuple)):
        if len(value) != 2:
            return None
        return value[0], value[1]
    if isinstance(value, str) and "," in value:
        low, high = value.split(",", 1)
        return low.strip(), high.strip()
    return None


def map_eq(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    if not target.is_numeric_range:
        return [(target.key, value)]
    bounds = _split_range(value)
    if bounds is None:
        if _is_blank(value):
            return []
        # A lone number on a range field is a lower bound
        return [(f"{target.key}[gte]", value)]
    low, high = bounds
    pairs: ParamPairs = []
    if not _is_blank(low):
        pairs.append((f"{target.key}[gte]", low))
    pairs.extend(_upper_bound_pairs(target, high, config))
    return pairs


def map_ne(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    return [(f"{target.key}[not]", value)]


def map_lt(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    suffix = "before" if target.is_date else "lt"
    return [(f"{target.key}[{suffix}]", value)]


def map_lte(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    suffix = "before" if target.is_date else "lte"
    return [(f"{target.key}[{suffix}]", value)]


def map_gt(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    suffix = "after" if target.is_date else "gt"
    return [(f"{target.key}[{suffix}]", value)]


def map_gte(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    suffix = "after" if target.is_date else "gte"
    return [(f"{target.key}[{suffix}]", value)]


def map_in(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    values = list(value) if isinstance(value, (list, tuple)) else [value]
    return [(f"{target.key}[]", values)]


def map_contains(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    return [(target.key, value)]


def map_between(target: ResolvedField, value: Any, config: FilterConfig) -> ParamPairs:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return []
    low, high = value
    if target.is_date:
        return [(f"{target.key}[after]", low), (f"{target.key}[before]", high)]

    pairs: ParamPairs = []
    numeric_low = _as_number(low)
    if numeric_low is not None and numeric_low > 0:
        pairs.append((f"{target.key}[gte]", low))
    pairs.extend(_upper_bound_pairs(target, high, config))
    return pairs


OPERATOR_HANDLERS: Dict[FilterOperator, Callable[[ResolvedField, Any, FilterConfig], ParamPairs]] = {
    FilterOperator.EQ: map_eq,
    FilterOperator.NE: map_ne,
    FilterOperator.LT: map_lt,
    FilterOperator.GT: map_gt,
    FilterOperator.LTE: map_lte,
    FilterOperator.GTE: map_gte,
    FilterOperator.IN: map_in,
    FilterOperator.CONTAINS: map_contains,
    FilterOperator.BETWEEN: map_between,
    FilterOperator.AFTER: map_gt,
    FilterOperator.BEFORE: map_lt,
}


def _coerce_filter(raw: Union[Filter, Dict[str, Any]]) -> Optional[Filter]:
    if isinstance(raw, Filter):
        return raw
    if isinstance(raw, dict) and "field" in raw:
        return Filter(field=raw["field"], operator=raw.get("operator", "eq"), value=raw.get("value"))
    # Logical groups ({"operator": "or", "value": [...]}) carry no field
    return None


def translate_filter(flt: Filter, config: Optional[FilterConfig] = None) -> ParamPairs:
    """
    Translate a single filter into query parameter pairs.

    Unknown operators produce no parameters.
    """
    config = config or default_filter_config()
    try:
        operator = FilterOperator(flt.operator)
    except ValueError:
        logger.debug(f"Ignoring filter on '{flt.field}' with unsupported operator '{flt.operator}'")
        return []
    target = resolve_field(flt.field, config)
    return OPERATOR_HANDLERS[operator](target, flt.value, config)


def map_filters(
    filters: Optional[Iterable[Union[Filter, Dict[str, Any]]]] = None,
    config: Optional[FilterConfig] = None,
) -> Dict[str, Any]:
    """
    Map dashboard filters to Hydra API query parameters.

    Args:
        filters: Filter models or dicts with ``field``/``operator``/``value``
        config: Translator tables (defaults to the built-in tables)

    Returns:
        Flat parameter map; list values become repeated parameters
    """
    config = config or default_filter_config()
    params: Dict[str, Any] = {}

    for raw in filters or []:
        flt = _coerce_filter(raw)
        if flt is None:
            continue
        for key, value in translate_filter(flt, config):
            accumulate = flt.field in ACCUMULATING_FIELDS and key.endswith("[]") and isinstance(flt.value, (list, tuple))
            if accumulate and isinstance(params.get(key), list):
                params[key] = params[key] + list(value)
            else:
                params[key] = value

    return params


def map_sorters(sorters: Optional[Iterable[Union[Sorter, Dict[str, Any]]]] = None) -> Dict[str, str]:
    """Map dashboard sorters to ``order[field]`` parameters."""
    order_params: Dict[str, str] = {}
    for raw in sorters or []:
        sorter = raw if isinstance(raw, Sorter) else Sorter(**raw)
        field = RENAMED_SORT_FIELDS.get(sorter.field, sorter.field)
        order_params[f"order[{field}]"] = sorter.order or "asc"
    return order_params


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_query_string(params: Dict[str, Any]) -> str:
    """
    Serialize a parameter map into a URL query string.

    List values repeat the key; ``None`` values are skipped.

    Returns:
        ``"?a=1&a=2&b=x"`` or an empty string when nothing is left
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _stringify(v)) for v in value if v is not None)
        elif value is not None:
            pairs.append((key, _stringify(value)))

    query_string = urlencode(pairs)
    return f"?{query_string}" if query_string else ""
