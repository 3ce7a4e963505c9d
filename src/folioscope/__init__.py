"""Client core for the folioscope portfolio and screener dashboard."""

__version__ = "0.4.0"
