"""Currency conversion rates to EUR, cached for 4 hours."""

from typing import Dict, Optional

from folioscope.hydra.cache import DEFAULT_TTL_SECONDS, CacheService, cache_service
from folioscope.hydra.http_client import HydraHttpClient
from folioscope.hydra.normalizers import extract_items_from_hydra_response
from folioscope.utils.logging import get_logger

logger = get_logger(__name__)

BASE_CURRENCY = "EUR"
RATES_CACHE_KEY = "currency-rates"
RATES_PATH = f"/currency-rates?currency={BASE_CURRENCY}"


def invert_rates(members) -> Dict[str, float]:
    """
    Turn API rows into a "1 target = X EUR" table.

    The API reports ``1 EUR = rate x targetCurrency``, so each rate is
    inverted. EUR itself is always present with rate 1.0.

    Args:
        members: Iterable of ``{"targetCurrency", "rate"}`` dicts

    Returns:
        Mapping of currency code to EUR value of one unit
    """
    rates: Dict[str, float] = {BASE_CURRENCY: 1.0}
    for item in members:
        if not isinstance(item, dict):
            continue
        target = item.get("targetCurrency")
        try:
            rate = float(item.get("rate"))
        except (TypeError, ValueError):
            rate = 0.0
        if not target or rate == 0:
            logger.warning(f"Skipping unusable currency rate row: {item}")
            continue
        rates[target] = 1 / rate
    return rates


class CurrencyRates:
    """
    Conversion rates with cache-first loading.

    Fetch failures are recorded on ``error`` and replaced with an
    EUR-only table, so ``get_rate`` never raises.
    """

    def __init__(self, client: HydraHttpClient, cache: Optional[CacheService] = None):
        self.client = client
        self.cache = cache if cache is not None else cache_service
        self.rates: Optional[Dict[str, float]] = None
        self.loading = True
        self.error: Optional[Exception] = None

    def fetch_rates(self) -> Dict[str, float]:
        cached = self.cache.get(RATES_CACHE_KEY)
        if cached:
            self.rates = cached
            self.loading = False
            return cached

        self.loading = True
        self.error = None
        try:
            response = self.client.http(RATES_PATH)
            rates = invert_rates(extract_items_from_hydra_response(response.data))
            self.cache.set(RATES_CACHE_KEY, rates, DEFAULT_TTL_SECONDS)
            self.rates = rates
            logger.info(f"Loaded {len(rates)} currency rates")
        except Exception as e:
            self.error = e
            logger.error(f"Failed to fetch currency rates: {e}")
            self.rates = {BASE_CURRENCY: 1.0}
        finally:
            self.loading = False
        return self.rates

    def refetch(self) -> Dict[str, float]:
        return self.fetch_rates()

    def get_rate(self, currency: Optional[str]) -> float:
        """
        EUR value of one unit of ``currency``.

        None, empty, EUR and unknown codes all resolve to 1.0.
        """
        if not currency or currency == BASE_CURRENCY:
            return 1.0
        if not self.rates:
            return 1.0
        return self.rates.get(currency) or 1.0

    def convert_to_eur(self, amount: float, currency: Optional[str]) -> float:
        return amount * self.get_rate(currency)


def use_currency_rates(client: HydraHttpClient, cache: Optional[CacheService] = None) -> CurrencyRates:
    """Create a rates holder and load it once."""
    rates = CurrencyRates(client, cache)
    rates.fetch_rates()
    return rates
