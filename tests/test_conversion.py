"""Tests for unit and currency conversion."""

import asyncio

import pytest

from gold_monitor.domain.errors import InvalidParameter, UnsupportedUnit, UpstreamError
from gold_monitor.services.conversion import (
    CurrencyConverter,
    convert_unit,
    unit_label,
)
from tests.conftest import FakeFxRateClient


def test_convert_unit_divides_by_factor() -> None:
    assert convert_unit(2000.0, "oz") == 2000.0
    assert convert_unit(31.1035, "gram") == pytest.approx(1.0)
    assert convert_unit(2000.0, "kg") == pytest.approx(2000.0 / 0.0311035)
    assert convert_unit(2000.0, "tola") == pytest.approx(2000.0 / 2.6667)
    assert convert_unit(2000.0, "baht") == pytest.approx(2000.0 / 15.244)


def test_convert_unit_gram_round_trip() -> None:
    price = 2034.56
    per_gram = convert_unit(price, "gram")

    assert convert_unit(per_gram * 31.1035, "oz") == pytest.approx(price)


def test_convert_unit_rejects_unknown_unit() -> None:
    with pytest.raises(UnsupportedUnit) as excinfo:
        convert_unit(100.0, "stone")

    assert isinstance(excinfo.value, InvalidParameter)


def test_unit_label_falls_back_to_code() -> None:
    assert unit_label("oz") == "Troy Ounce"
    assert unit_label("gram") == "Gram"
    assert unit_label("stone") == "stone"


def test_same_currency_skips_network() -> None:
    fx_client = FakeFxRateClient()
    converter = CurrencyConverter(fx_client)

    assert asyncio.run(converter.convert(2000.0, "USD", "usd")) == 2000.0
    assert fx_client.calls == []


def test_convert_applies_rate() -> None:
    fx_client = FakeFxRateClient()
    converter = CurrencyConverter(fx_client)

    assert asyncio.run(converter.convert(2000.0, "USD", "EUR")) == pytest.approx(1800.0)
    assert fx_client.calls == ["USD"]


def test_missing_rate_returns_unconverted_price() -> None:
    converter = CurrencyConverter(FakeFxRateClient())

    assert asyncio.run(converter.rate("USD", "JPY")) is None
    assert asyncio.run(converter.convert(2000.0, "USD", "JPY")) == 2000.0


def test_fx_failure_returns_unconverted_price() -> None:
    fx_client = FakeFxRateClient(error=UpstreamError("FX API timed out after 10.0s"))
    converter = CurrencyConverter(fx_client)

    assert asyncio.run(converter.convert(2000.0, "USD", "EUR")) == 2000.0


@pytest.mark.parametrize("bad_rate", [0, -0.9, "inf", "nan"])
def test_unusable_rate_returns_unconverted_price(bad_rate: object) -> None:
    fx_client = FakeFxRateClient(rates={"USD": {"EUR": bad_rate}})
    converter = CurrencyConverter(fx_client)

    assert asyncio.run(converter.rate("USD", "EUR")) is None
    assert asyncio.run(converter.convert(2000.0, "USD", "EUR")) == 2000.0
