"""Currency resolution, conversion and formatting.

Amounts are stored in the base currency; conversion only happens on the way
out.  Unknown currency codes degrade to the base currency instead of raising.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings

from core.money import quantize_money, to_decimal
from currency.rates import get_rates_provider

logger = logging.getLogger("uniqverse")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "AUD": "A$",
    "CAD": "C$",
    "JPY": "¥",
}

# Currencies without a minor unit.
ZERO_DECIMAL_CURRENCIES = {"JPY"}


def is_supported_currency(code) -> bool:
    return isinstance(code, str) and code.upper() in settings.SUPPORTED_CURRENCIES


def resolve_currency(code) -> str:
    """Return the upper-cased *code* when supported, else the base currency."""
    if is_supported_currency(code):
        return code.upper()
    return settings.BASE_CURRENCY


def currency_places(code) -> int:
    return 0 if code in ZERO_DECIMAL_CURRENCIES else 2


def convert_amount(amount, currency, provider=None, rates=None) -> Decimal:
    """Convert a base-currency *amount* into *currency*.

    The base currency returns *amount* unchanged.  Pass *rates* to reuse an
    already loaded table.
    """
    currency = resolve_currency(currency)
    if currency == settings.BASE_CURRENCY:
        return amount

    if rates is None:
        rates = (provider or get_rates_provider()).get_rates()
    rate = rates.get(currency)
    if rate is None:
        logger.warning("No exchange rate for %s, amount left unconverted", currency)
        return amount
    return quantize_money(to_decimal(amount) * to_decimal(rate), currency_places(currency))


class CurrencyConverter:
    """Converts many amounts into one currency with a single rate lookup."""

    def __init__(self, currency=None, provider=None):
        self.currency = resolve_currency(currency)
        self._provider = provider
        self._rates = None

    @property
    def is_identity(self):
        return self.currency == settings.BASE_CURRENCY

    @property
    def rates(self):
        if self._rates is None:
            self._rates = (self._provider or get_rates_provider()).get_rates()
        return self._rates

    def convert(self, amount):
        if self.is_identity:
            return amount
        return convert_amount(amount, self.currency, rates=self.rates)

    __call__ = convert


def format_price(amount, currency=None) -> str:
    """Format *amount* (already in *currency*) with its symbol, e.g. ``€9.20``."""
    currency = resolve_currency(currency)
    places = currency_places(currency)
    value = quantize_money(amount, places)
    symbol = CURRENCY_SYMBOLS.get(currency, "$")
    return f"{symbol}{value:,.{places}f}"
