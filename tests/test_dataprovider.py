import json
import random
import threading
from datetime import datetime, time, timedelta

import pytest

from quoteclient.dataprovider import (
    DEFAULT_QUOTES_URL,
    SIMULATED_STOCKS,
    DataProvider,
    QuoteFetchError,
    generate_simulated_data,
    parse_market_data,
)
from quoteclient.stockitem import MarketType

NOW = datetime(2024, 3, 15, 10, 0, 0)


def fixed_clock():
    return NOW


def _document():
    return json.dumps(
        {
            "stocks": [
                {
                    "code": "600000",
                    "name": "Bank",
                    "current": 10.5,
                    "open": 10.0,
                    "high": 11.0,
                    "low": 9.5,
                    "previous": 10.2,
                    "volume": 123456,
                    "amount": 1296288.0,
                },
                {"code": "000001", "name": "Other"},
                "not an object",
            ]
        }
    ).encode()


class _Recorder:
    def __init__(self):
        self.received = []
        self.event = threading.Event()

    def __call__(self, data):
        self.received.append(data)
        self.event.set()


# parse_market_data


def test_parse_full_document():
    data = parse_market_data(_document(), NOW)
    assert data.codes() == ["000001", "600000"]
    assert data.update_time == NOW
    stock = data.get_stock("600000")
    assert stock.name == "Bank"
    assert stock.current_price == 10.5
    assert stock.open_price == 10.0
    assert stock.high_price == 11.0
    assert stock.low_price == 9.5
    assert stock.previous_close == 10.2
    assert stock.volume == 123456
    assert stock.amount == 1296288.0
    assert stock.update_time == NOW


def test_parse_missing_fields_default_to_zero():
    stock = parse_market_data(_document(), NOW).get_stock("000001")
    assert stock.name == "Other"
    assert stock.current_price == 0.0
    assert stock.volume == 0
    assert stock.kline_data == []


def test_parsed_stocks_keep_unknown_market_type():
    data = parse_market_data(_document(), NOW)
    assert all(stock.market_type is MarketType.UNKNOWN for stock in data)


def test_parse_accepts_text():
    data = parse_market_data(_document().decode(), NOW)
    assert len(data) == 2


@pytest.mark.parametrize("payload", [b"{not json", b"[1, 2, 3]", b"\xff\xfe", b""])
def test_parse_rejects_non_objects(payload):
    data = parse_market_data(payload, NOW)
    assert len(data) == 0
    assert data.update_time is None


def test_parse_object_without_stocks_sets_time_only():
    data = parse_market_data(b'{"other": 1}', NOW)
    assert len(data) == 0
    assert data.update_time == NOW


def test_parse_wrong_value_types():
    payload = json.dumps(
        {"stocks": [{"code": 600000, "name": None, "current": "10.5", "volume": "42"}]}
    )
    data = parse_market_data(payload, NOW)
    stock = data.get_stock("")
    assert stock.name == ""
    assert stock.current_price == 0.0
    assert stock.volume == 42


def test_parse_duplicate_codes_keep_last():
    payload = json.dumps(
        {"stocks": [{"code": "600000", "current": 1.0}, {"code": "600000", "current": 2.0}]}
    )
    data = parse_market_data(payload, NOW)
    assert len(data) == 1
    assert data.get_stock("600000").current_price == 2.0


# generate_simulated_data


def test_simulated_data_covers_all_stocks():
    data = generate_simulated_data(SIMULATED_STOCKS, random.Random(1), NOW)
    assert data.codes() == sorted(SIMULATED_STOCKS)
    assert data.update_time == NOW
    for code, name in SIMULATED_STOCKS.items():
        stock = data.get_stock(code)
        assert stock.name == name
        assert stock.update_time == NOW


def test_simulated_data_is_deterministic_for_seed():
    first = generate_simulated_data(SIMULATED_STOCKS, random.Random(7), NOW)
    second = generate_simulated_data(SIMULATED_STOCKS, random.Random(7), NOW)
    assert first.stocks() == second.stocks()


def test_simulated_market_types_follow_codes():
    data = generate_simulated_data(SIMULATED_STOCKS, random.Random(2), NOW)
    assert data.codes_by_market_type(MarketType.STAR_MARKET) == ["688111", "688981"]
    assert data.codes_by_market_type(MarketType.CHINEXT) == ["300059", "300122"]
    assert len(data.codes_by_market_type(MarketType.SHANGHAI_A)) == 6


def test_simulated_prices_are_consistent():
    data = generate_simulated_data(SIMULATED_STOCKS, random.Random(3), NOW)
    for stock in data:
        assert stock.high_price >= max(stock.current_price, stock.open_price)
        assert stock.low_price <= min(stock.current_price, stock.open_price)
        assert 100000 <= stock.volume < 10000000
        assert stock.amount == pytest.approx(stock.volume * stock.current_price)


@pytest.mark.parametrize(
    "code, low, high",
    [("600000", 10.0, 50.0), ("000001", 8.0, 40.0), ("300059", 30.0, 80.0), ("688111", 50.0, 150.0)],
)
def test_simulated_previous_close_stays_near_base_range(code, low, high):
    for seed in range(20):
        stock = generate_simulated_data({code: "x"}, random.Random(seed), NOW).get_stock(code)
        assert low * 0.98 <= stock.previous_close <= high * 1.02


def test_unrecognised_code_gets_zero_prices():
    stock = generate_simulated_data({"900001": "x"}, random.Random(4), NOW).get_stock("900001")
    assert stock.previous_close == 0.0
    assert stock.current_price == 0.0
    assert stock.market_type is MarketType.UNKNOWN


def test_simulated_kline_history():
    stock = generate_simulated_data({"600000": "x"}, random.Random(5), NOW).get_stock("600000")
    candles = stock.kline_data
    assert len(candles) == 30
    assert candles[0].timestamp == NOW - timedelta(days=30)
    assert candles[-1].timestamp == NOW - timedelta(days=1)
    for candle in candles:
        assert candle.high >= max(candle.open, candle.close)
        assert candle.low <= min(candle.open, candle.close)
        assert 500000 <= candle.volume < 5000000
        assert candle.amount == pytest.approx(candle.volume * (candle.high + candle.low) / 2)


def test_simulated_intraday_sessions():
    stock = generate_simulated_data({"000001": "x"}, random.Random(6), NOW).get_stock("000001")
    points = stock.time_series_data
    assert len(points) == 240
    assert all(point.timestamp.date() == NOW.date() for point in points)
    assert points[0].timestamp.time() == time(9, 30)
    assert points[119].timestamp.time() == time(11, 29)
    assert points[120].timestamp.time() == time(13, 0)
    assert points[-1].timestamp.time() == time(14, 59)
    assert all(10000 <= point.volume < 100000 for point in points)
    assert points[0].price == pytest.approx(stock.open_price, rel=0.005)


# DataProvider


def test_default_url_and_stocks():
    provider = DataProvider()
    assert provider.url == DEFAULT_QUOTES_URL
    assert provider.stocks == SIMULATED_STOCKS
    assert provider.is_running is False


def test_start_emits_simulated_data_once():
    recorder = _Recorder()
    with DataProvider(rng=random.Random(1), clock=fixed_clock, simulate_interval_ms=60000) as provider:
        provider.data_received.connect(recorder)
        provider.start()
        provider.start()
        assert provider.is_running
        assert len(recorder.received) == 1
        assert recorder.received[0].codes() == sorted(SIMULATED_STOCKS)
        assert recorder.received[0].update_time == NOW
    assert provider.is_running is False


def test_refresh_only_while_running():
    recorder = _Recorder()
    provider = DataProvider(rng=random.Random(1), clock=fixed_clock, simulate_interval_ms=60000)
    provider.data_received.connect(recorder)
    provider.on_refresh_requested()
    assert recorder.received == []
    provider.start()
    provider.on_refresh_requested()
    assert len(recorder.received) == 2
    provider.stop()
    provider.on_refresh_requested()
    assert len(recorder.received) == 2


def test_timer_produces_data():
    recorder = _Recorder()
    provider = DataProvider(stocks={"600000": "x"}, rng=random.Random(1), simulate_interval_ms=10)
    provider.data_received.connect(recorder)
    provider.start()
    recorder.event.clear()
    try:
        assert recorder.event.wait(5.0)
    finally:
        provider.stop()
    assert len(recorder.received) >= 2
    assert recorder.received[-1].codes() == ["600000"]


def test_network_mode_start_fetches():
    requested = []

    def opener(url):
        requested.append(url)
        return _document()

    recorder = _Recorder()
    provider = DataProvider(use_simulated_data=False, clock=fixed_clock, opener=opener)
    provider.data_received.connect(recorder)
    provider.start()
    assert requested == [DEFAULT_QUOTES_URL]
    assert recorder.received[0].codes() == ["000001", "600000"]
    provider.on_refresh_requested()
    assert len(requested) == 2
    provider.stop()


def test_fetch_returns_and_emits():
    recorder = _Recorder()
    provider = DataProvider(use_simulated_data=False, clock=fixed_clock, opener=lambda url: _document())
    provider.data_received.connect(recorder)
    data = provider.fetch("http://localhost/quotes")
    assert recorder.received == [data]
    assert data.get_stock("600000").current_price == 10.5


def test_fetch_failure_raises():
    def opener(url):
        raise OSError("connection refused")

    provider = DataProvider(use_simulated_data=False, opener=opener)
    with pytest.raises(QuoteFetchError):
        provider.fetch()


def test_start_with_failing_network_logs_and_emits_nothing():
    def opener(url):
        raise OSError("connection refused")

    recorder = _Recorder()
    provider = DataProvider(use_simulated_data=False, opener=opener)
    provider.data_received.connect(recorder)
    provider.start()
    assert provider.is_running
    assert recorder.received == []
    provider.stop()