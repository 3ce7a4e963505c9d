"""Convert screener filter-form values into query filters."""

from typing import Any, Dict, List, Sequence

from pydantic import BaseModel

from folioscope.hydra.filter_mapping import Filter, FilterOperator


class RangeField(BaseModel):
    name: str
    label: str
    min: float | None = None
    max: float | None = None
    multiplier: float = 1


# Market cap is entered in millions
MARKETCAP = RangeField(name="marketcap", label="Market Cap (M€)", multiplier=1_000_000)

CRYPTO_RANGE_FIELDS: List[RangeField] = [
    MARKETCAP,
    RangeField(name="adx", label="ADX"),
    RangeField(name="atrPercent", label="Volatility"),
]

INDEX_RANGE_FIELDS: List[RangeField] = [
    RangeField(name="adx", label="ADX"),
    RangeField(name="atrPercent", label="Volatility"),
]

ASSET_RANGE_FIELDS: List[RangeField] = [
    MARKETCAP,
    RangeField(name="adx", label="ADX"),
    RangeField(name="atrPercent", label="Volatility"),
    RangeField(name="lassoScore", label="Lasso Score"),
    RangeField(name="visScore", label="VIS Score"),
    RangeField(name="globalStars", label="VIS Stars", min=1, max=5),
    RangeField(name="zonebourseInvestisseur", label="ZB Invest."),
    RangeField(name="fintelScore", label="Fintel comp"),
    RangeField(name="zonebourseScore", label="ZB comp"),
    RangeField(name="piotrosBeneishSloanScore", label="VIS PBS"),
]

RANGE_PRESETS: Dict[str, List[RangeField]] = {
    "crypto": CRYPTO_RANGE_FIELDS,
    "indexes": INDEX_RANGE_FIELDS,
    "assets": ASSET_RANGE_FIELDS,
}


def _format_bound(value: Any, multiplier: float) -> str:
    if value is None:
        return ""
    scaled = value * multiplier
    if isinstance(scaled, float) and scaled.is_integer():
        scaled = int(scaled)
    return str(scaled)


def _list_filter(field: str, values: Any) -> List[Filter]:
    if not values:
        return []
    return [Filter(field=field, operator=FilterOperator.IN.value, value=list(values))]


def form_values_to_filters(
    values: Dict[str, Any],
    range_fields: Sequence[RangeField] = CRYPTO_RANGE_FIELDS,
    with_watchlist: bool = True,
) -> List[Filter]:
    """
    Build filters from the sidebar form.

    Each range field reads ``<name>Min``/``<name>Max`` and, when either is
    set, yields an ``eq`` filter valued ``"min,max"`` with the missing side
    left empty. ``countryCode`` and ``watchlist`` selections become ``in``
    filters.

    Args:
        values: Submitted form values
        range_fields: Range inputs shown by the form
        with_watchlist: Whether the form has a watchlist selector

    Returns:
        Filters ready for ``map_filters``
    """
    filters: List[Filter] = []

    for field in range_fields:
        low = values.get(f"{field.name}Min")
        high = values.get(f"{field.name}Max")
        if low is None and high is None:
            continue
        filters.append(
            Filter(
                field=field.name,
                operator=FilterOperator.EQ.value,
                value=f"{_format_bound(low, field.multiplier)},{_format_bound(high, field.multiplier)}",
            )
        )

    filters.extend(_list_filter("countryCode", values.get("countryCode")))
    if with_watchlist:
        filters.extend(_list_filter("watchlist", values.get("watchlist")))

    return filters
