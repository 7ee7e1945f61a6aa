"""Celery tasks for the currency app."""
import logging

from celery import shared_task

from currency.rates import HttpRatesProvider, get_rates_provider

logger = logging.getLogger("uniqverse")


@shared_task(name="currency.tasks.refresh_exchange_rates")
def refresh_exchange_rates():
    """Re-fetch the rate table so requests hit a warm cache."""
    provider = get_rates_provider()
    if isinstance(provider, HttpRatesProvider):
        table = provider.get_rate_table(refresh=True)
    else:
        table = provider.get_rate_table()
    logger.info(
        "Exchange rates refreshed from %s (fallback=%s)",
        table.provider,
        table.is_fallback,
    )
    return {
        "provider": table.provider,
        "is_fallback": table.is_fallback,
        "rates": {code: str(rate) for code, rate in table.rates.items()},
    }
