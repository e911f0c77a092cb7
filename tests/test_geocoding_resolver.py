import asyncio
import math

from territory_console.models.domain import Coordinate
from territory_console.services.geocoding import GeocodeErrorKind, GeocodeResolver, ProviderResult


class ScriptedProvider:
    """Returns queued results in order and records every call."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    async def geocode(self, address, *, region, bounds):
        self.calls.append((address, region, bounds))
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class SlowProvider:
    def __init__(self):
        self.calls = 0

    async def geocode(self, address, *, region, bounds):
        self.calls += 1
        await asyncio.sleep(1)
        return ProviderResult(lat=39.7, lng=-104.9, country="US")


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _denver():
    return ProviderResult(lat=39.7392, lng=-104.9903, country="US", formatted_address="Denver, CO, USA")


def _resolver(provider, sleep=None, **kwargs):
    kwargs.setdefault("max_attempts", 2)
    kwargs.setdefault("backoff_seconds", 1.0)
    kwargs.setdefault("timeout_seconds", 5.0)
    return GeocodeResolver(provider, region="us", sleep=sleep or RecordingSleep(), **kwargs)


def test_resolves_us_address():
    provider = ScriptedProvider(_denver())
    result = asyncio.run(_resolver(provider).resolve("1600 Broadway, Denver, CO 80202"))

    assert result == Coordinate(39.7392, -104.9903)
    address, region, bounds = provider.calls[0]
    assert address == "1600 Broadway, Denver, CO 80202"
    assert region == "us"
    assert bounds.north > bounds.south


def test_blank_address_never_calls_provider():
    provider = ScriptedProvider()
    resolver = _resolver(provider)

    assert asyncio.run(resolver.resolve("")) is None
    assert asyncio.run(resolver.resolve("   ")) is None
    assert provider.calls == []


def test_rate_limit_is_retried_until_budget_is_spent():
    provider = ScriptedProvider(
        ProviderResult.failure(GeocodeErrorKind.RATE_LIMITED),
        ProviderResult.failure(GeocodeErrorKind.RATE_LIMITED),
    )
    sleep = RecordingSleep()

    result = asyncio.run(_resolver(provider, sleep).resolve("1 Main St, Denver, CO 80202"))

    assert result is None
    assert len(provider.calls) == 2
    # one backoff between the two attempts, none after the last
    assert sleep.delays == [1.0]


def test_backoff_doubles_between_attempts():
    provider = ScriptedProvider(
        ProviderResult.failure(GeocodeErrorKind.NETWORK_ERROR),
        ProviderResult.failure(GeocodeErrorKind.TIMEOUT),
        _denver(),
    )
    sleep = RecordingSleep()

    result = asyncio.run(_resolver(provider, sleep, max_attempts=3).resolve("1 Main St, Denver, CO 80202"))

    assert result == Coordinate(39.7392, -104.9903)
    assert sleep.delays == [1.0, 2.0]


def test_non_retryable_errors_stop_after_one_attempt():
    for kind in (
        GeocodeErrorKind.ZERO_RESULTS,
        GeocodeErrorKind.REQUEST_DENIED,
        GeocodeErrorKind.INVALID_REQUEST,
        GeocodeErrorKind.UNKNOWN,
    ):
        provider = ScriptedProvider(ProviderResult.failure(kind), _denver())
        sleep = RecordingSleep()

        assert asyncio.run(_resolver(provider, sleep).resolve("somewhere")) is None
        assert len(provider.calls) == 1
        assert sleep.delays == []


def test_non_us_result_is_rejected_without_retry():
    provider = ScriptedProvider(ProviderResult(lat=45.5, lng=-73.5, country="CA"), _denver())

    assert asyncio.run(_resolver(provider).resolve("Montreal")) is None
    assert len(provider.calls) == 1


def test_usa_country_code_is_accepted():
    provider = ScriptedProvider(ProviderResult(lat=39.7, lng=-104.9, country="USA"))
    assert asyncio.run(_resolver(provider).resolve("Denver")) == Coordinate(39.7, -104.9)


def test_us_result_outside_continental_bounds_is_rejected():
    honolulu = ProviderResult(lat=21.3069, lng=-157.8583, country="US")
    provider = ScriptedProvider(honolulu)

    assert asyncio.run(_resolver(provider).resolve("Honolulu, HI")) is None


def test_non_finite_coordinates_are_rejected():
    provider = ScriptedProvider(ProviderResult(lat=math.nan, lng=-104.9, country="US"))
    assert asyncio.run(_resolver(provider).resolve("Denver")) is None


def test_provider_exception_is_contained():
    provider = ScriptedProvider(RuntimeError("boom"))
    assert asyncio.run(_resolver(provider).resolve("Denver")) is None


def test_slow_provider_times_out_and_is_retried():
    provider = SlowProvider()
    sleep = RecordingSleep()
    resolver = _resolver(provider, sleep, timeout_seconds=0.01)

    assert asyncio.run(resolver.resolve("Denver")) is None
    assert provider.calls == 2
    assert sleep.delays == [1.0]
