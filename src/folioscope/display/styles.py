"""Threshold-based styling for score badges."""

from enum import Enum
from typing import Any, Dict, Iterable, Optional


class ScoreStyle(str, Enum):
    HIGHEST = "highest"
    HIGHER = "higher"
    LOWER = "lower"
    LOWEST = "lowest"
    NEUTRAL = "neutral"


SCORE_STYLES: Dict[ScoreStyle, Dict[str, Any]] = {
    ScoreStyle.HIGHEST: {"color": "#52c41a", "fontWeight": 600},
    ScoreStyle.HIGHER: {"color": "#73d13d"},
    ScoreStyle.LOWER: {"color": "#ff7875"},
    ScoreStyle.LOWEST: {"color": "#a61d24", "fontWeight": 600},
    ScoreStyle.NEUTRAL: {},
}

ADX_STRONG = 30
ADX_MODERATE = 15


def adx_style(adx: float) -> ScoreStyle:
    """Trend strength uses |adx|; the sign picks the bullish or bearish side."""
    magnitude = abs(adx)
    if magnitude > ADX_STRONG:
        return ScoreStyle.HIGHEST if adx > 0 else ScoreStyle.LOWEST
    if magnitude > ADX_MODERATE:
        return ScoreStyle.HIGHER if adx > 0 else ScoreStyle.LOWER
    return ScoreStyle.NEUTRAL


def get_metric_value(screener_assets: Optional[Iterable[Dict[str, Any]]], metric_key: str) -> Optional[str]:
    """First value of ``metric_key`` across an asset's screener entries."""
    for screener_asset in screener_assets or []:
        metrics = screener_asset.get("metrics") or {}
        if metric_key in metrics:
            return metrics[metric_key]
    return None
