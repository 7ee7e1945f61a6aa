"""Exchange-rate providers.

Rates are quoted against the base currency (USD): ``amount_in_x = amount_usd * rates[x]``.
The HTTP provider tries each upstream API in turn and falls back to the
built-in table when all of them fail, so a rate lookup never raises.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from typing import Callable, Optional

import requests
from django.conf import settings
from django.utils import timezone

from core.cache import ReadThroughCache
from core.money import to_decimal

logger = logging.getLogger("uniqverse")

FALLBACK_RATES = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "AUD": Decimal("1.51"),
    "CAD": Decimal("1.36"),
    "JPY": Decimal("154.35"),
}

RATES_CACHE_KEY = "currency:rates"


class ProviderError(Exception):
    """An upstream rate API answered with something unusable."""


@dataclass
class RateTable:
    base: str
    rates: dict
    date: str = ""
    provider: str = ""
    is_fallback: bool = False
    error: str = ""


def filter_rates(rates, supported=None, base=None):
    """Keep supported currencies only, with the base pinned to 1."""
    supported = supported or settings.SUPPORTED_CURRENCIES
    base = base or settings.BASE_CURRENCY
    filtered = {base: Decimal("1")}
    for code in supported:
        if code == base:
            continue
        value = rates.get(code)
        if value:
            filtered[code] = to_decimal(value)
    return filtered


def fallback_table(error=""):
    return RateTable(
        base=settings.BASE_CURRENCY,
        rates=dict(FALLBACK_RATES),
        date=timezone.now().isoformat(),
        provider="fallback",
        is_fallback=True,
        error=error,
    )


class StaticRatesProvider:
    """Fixed rate table; used in tests and when outbound HTTP is disabled."""

    def __init__(self, rates=None):
        self.rates = dict(rates if rates is not None else FALLBACK_RATES)

    def get_rate_table(self) -> RateTable:
        return RateTable(
            base=settings.BASE_CURRENCY,
            rates=dict(self.rates),
            date=timezone.now().isoformat(),
            provider="static",
        )

    def get_rates(self) -> dict:
        return self.get_rate_table().rates


@dataclass
class _Upstream:
    name: str
    url: str
    parse: Callable[[dict], RateTable]
    needs_key: bool = False
    params: dict = field(default_factory=dict)


def _parse_exchangerate_api(data):
    if data.get("result") != "success":
        raise ProviderError(f"API error: {data.get('error-type') or data.get('error_type')}")
    return RateTable(
        base="USD",
        rates=filter_rates(data.get("conversion_rates") or {}),
        date=data.get("time_last_update_utc", ""),
    )


def _parse_frankfurter(data):
    rates = dict(data.get("rates") or {})
    if not rates:
        raise ProviderError("Empty rate table")
    return RateTable(base="USD", rates=filter_rates(rates), date=data.get("date", ""))


def _parse_open_exchange_rates(data):
    if data.get("base") != "USD":
        raise ProviderError("Unexpected API response")
    timestamp = data.get("timestamp")
    if timestamp:
        date = datetime.fromtimestamp(timestamp, tz=dt_timezone.utc).isoformat()
    else:
        date = timezone.now().isoformat()
    return RateTable(base="USD", rates=filter_rates(data.get("rates") or {}), date=date)


class HttpRatesProvider:
    """Fetch live rates over HTTP, caching successful tables."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
        cache: Optional[ReadThroughCache] = None,
    ):
        self.api_key = settings.EXCHANGE_RATE_API_KEY if api_key is None else api_key
        self.session = session or requests.Session()
        self.timeout = settings.EXCHANGE_RATE_TIMEOUT if timeout is None else timeout
        self.cache = cache or ReadThroughCache(ttl=settings.EXCHANGE_RATE_CACHE_SECONDS)

    def upstreams(self):
        key = self.api_key
        symbols = ",".join(settings.SUPPORTED_CURRENCIES)
        return [
            _Upstream(
                name="ExchangeRate-API",
                url=f"https://v6.exchangerate-api.com/v6/{key}/latest/USD",
                parse=_parse_exchangerate_api,
                needs_key=True,
            ),
            _Upstream(
                name="Frankfurter",
                url="https://api.frankfurter.app/latest",
                parse=_parse_frankfurter,
                params={"from": "USD", "to": symbols},
            ),
            _Upstream(
                name="Open Exchange Rates",
                url="https://openexchangerates.org/api/latest.json",
                parse=_parse_open_exchange_rates,
                needs_key=True,
                params={"app_id": key, "base": "USD"},
            ),
        ]

    def fetch(self) -> RateTable:
        """Query the upstream APIs in order; the first usable answer wins."""
        for upstream in self.upstreams():
            if upstream.needs_key and not self.api_key:
                continue
            try:
                response = self.session.get(
                    upstream.url,
                    params=upstream.params or None,
                    timeout=self.timeout,
                )
                if response.status_code != 200:
                    logger.warning(
                        "%s exchange-rate API responded with status %s",
                        upstream.name,
                        response.status_code,
                    )
                    continue
                table = upstream.parse(response.json())
            except (requests.RequestException, ValueError, ProviderError) as exc:
                logger.warning("%s exchange-rate API failed: %s", upstream.name, exc)
                continue
            table.provider = upstream.name
            logger.info("Exchange rates fetched from %s", upstream.name)
            return table

        logger.warning("Using fallback exchange rates: all providers failed")
        return fallback_table("All API providers failed")

    def get_rate_table(self, refresh=False) -> RateTable:
        if not refresh:
            cached = self.cache.get(RATES_CACHE_KEY)
            if cached is not None:
                return cached
        table = self.fetch()
        if not table.is_fallback:
            self.cache.set(RATES_CACHE_KEY, table)
        return table

    def get_rates(self) -> dict:
        return self.get_rate_table().rates


def get_rates_provider():
    """Provider selected by ``EXCHANGE_RATE_PROVIDER`` (``http`` or ``static``)."""
    if settings.EXCHANGE_RATE_PROVIDER == "static":
        return StaticRatesProvider()
    return HttpRatesProvider()
