from decimal import Decimal

import requests
from django.core.cache import cache as django_cache

from core.cache import ReadThroughCache
from currency.rates import FALLBACK_RATES, HttpRatesProvider, StaticRatesProvider, get_rates_provider
from currency.tasks import refresh_exchange_rates


class StubResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        if self.payload is None:
            raise ValueError("No JSON object could be decoded")
        return self.payload


class StubSession:
    """Answers by URL substring; values are responses or exceptions."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(url)
        for fragment, answer in self.routes.items():
            if fragment in url:
                if isinstance(answer, Exception):
                    raise answer
                return answer
        raise requests.ConnectionError(f"unexpected url {url}")


EXCHANGERATE_OK = StubResponse({
    "result": "success",
    "time_last_update_utc": "Fri, 10 May 2024 00:00:01 +0000",
    "conversion_rates": {"USD": 1, "EUR": 0.93, "GBP": 0.8, "JPY": 155.1, "CHF": 0.9},
})
FRANKFURTER_OK = StubResponse({
    "date": "2024-05-10",
    "rates": {"EUR": 0.94, "GBP": 0.81, "AUD": 1.52, "CAD": 1.37, "JPY": 156.0},
})
OXR_OK = StubResponse({
    "base": "USD",
    "timestamp": 1715299200,
    "rates": {"EUR": 0.95, "GBP": 0.82},
})


def _provider(session, api_key="secret"):
    return HttpRatesProvider(
        api_key=api_key,
        session=session,
        timeout=1,
        cache=ReadThroughCache(backend=django_cache, ttl=3600),
    )


def test_first_provider_wins_and_rates_are_filtered():
    session = StubSession({"exchangerate-api": EXCHANGERATE_OK})

    table = _provider(session).get_rate_table()

    assert table.provider == "ExchangeRate-API"
    assert not table.is_fallback
    assert table.rates == {
        "USD": Decimal("1"),
        "EUR": Decimal("0.93"),
        "GBP": Decimal("0.8"),
        "JPY": Decimal("155.1"),
    }
    assert len(session.calls) == 1


def test_keyed_providers_are_skipped_without_api_key():
    session = StubSession({"frankfurter": FRANKFURTER_OK})

    table = _provider(session, api_key="").get_rate_table()

    assert table.provider == "Frankfurter"
    assert table.rates["USD"] == Decimal("1")
    assert table.rates["CAD"] == Decimal("1.37")
    assert len(session.calls) == 1


def test_failing_providers_are_skipped_in_order():
    session = StubSession({
        "exchangerate-api": StubResponse({"result": "error", "error-type": "invalid-key"}),
        "frankfurter": StubResponse(status_code=503),
        "openexchangerates": OXR_OK,
    })

    table = _provider(session).get_rate_table()

    assert table.provider == "Open Exchange Rates"
    assert table.rates == {"USD": Decimal("1"), "EUR": Decimal("0.95"), "GBP": Decimal("0.82")}
    assert len(session.calls) == 3


def test_all_providers_failing_uses_fallback_rates():
    session = StubSession({
        "exchangerate-api": requests.Timeout("slow"),
        "frankfurter": StubResponse(payload=None),
        "openexchangerates": requests.ConnectionError("down"),
    })

    table = _provider(session).get_rate_table()

    assert table.is_fallback
    assert table.rates == FALLBACK_RATES
    assert table.error == "All API providers failed"


def test_successful_tables_are_cached():
    session = StubSession({"exchangerate-api": EXCHANGERATE_OK})
    provider = _provider(session)

    provider.get_rates()
    provider.get_rates()
    assert len(session.calls) == 1

    provider.get_rate_table(refresh=True)
    assert len(session.calls) == 2


def test_fallback_tables_are_not_cached():
    session = StubSession({})
    provider = _provider(session)

    provider.get_rates()
    provider.get_rates()

    assert len(session.calls) == 6


def test_provider_selection_follows_settings(settings):
    settings.EXCHANGE_RATE_PROVIDER = "static"
    assert isinstance(get_rates_provider(), StaticRatesProvider)

    settings.EXCHANGE_RATE_PROVIDER = "http"
    assert isinstance(get_rates_provider(), HttpRatesProvider)


def test_refresh_task_reports_rates(settings):
    settings.EXCHANGE_RATE_PROVIDER = "static"

    result = refresh_exchange_rates()

    assert result["provider"] == "static"
    assert result["is_fallback"] is False
    assert result["rates"]["EUR"] == "0.92"
