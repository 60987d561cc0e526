"""Market data sources: a JSON quote feed and a random quote simulator."""

from __future__ import annotations

import json
import logging
import random
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping
from datetime import datetime, time, timedelta
from typing import Any

from quoteclient.events import RepeatingTimer, Signal
from quoteclient.marketdata import MarketData
from quoteclient.stockitem import StockItem, StockTradeData, TimeSeriesPoint

logger = logging.getLogger(__name__)

DEFAULT_QUOTES_URL = "https://api.example.com/market/quotes"
SIMULATE_INTERVAL_MS = 3000
KLINE_DAYS = 30
SESSION_MINUTES = 120
MORNING_OPEN = time(9, 30)
AFTERNOON_OPEN = time(13, 0)

SIMULATED_STOCKS: dict[str, str] = {
    "600000": "浦发银行",
    "600036": "招商银行",
    "601398": "工商银行",
    "601988": "中国银行",
    "600519": "贵州茅台",
    "600887": "伊利股份",
    "000001": "平安银行",
    "000333": "美的集团",
    "000651": "格力电器",
    "000858": "五粮液",
    "300059": "东方财富",
    "300122": "智飞生物",
    "688111": "金山办公",
    "688981": "中芯国际",
}

_BASE_PRICE_RANGES: tuple[tuple[tuple[str, ...], float, float], ...] = (
    (("600", "601"), 10.0, 50.0),
    (("000",), 8.0, 40.0),
    (("300",), 30.0, 80.0),
    (("688",), 50.0, 150.0),
)


class QuoteFetchError(Exception):
    """Raised when quotes cannot be fetched from the network."""


def _json_string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _json_double(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _json_long(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return int(value + 0.5) if value >= 0 else int(value - 0.5)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


_PRICE_FIELDS = (
    ("current", "current_price"),
    ("open", "open_price"),
    ("high", "high_price"),
    ("low", "low_price"),
    ("previous", "previous_close"),
    ("amount", "amount"),
)


def _parse_stock(entry: dict[str, Any], now: datetime) -> StockItem:
    item = StockItem()
    if "code" in entry:
        item.code = _json_string(entry["code"])
    if "name" in entry:
        item.name = _json_string(entry["name"])
    for key, attribute in _PRICE_FIELDS:
        if key in entry:
            setattr(item, attribute, _json_double(entry[key]))
    if "volume" in entry:
        item.volume = _json_long(entry["volume"])
    item.update_time = now
    return item


def parse_market_data(data: bytes | str, now: datetime) -> MarketData:
    """Parse a ``{"stocks": [...]}`` JSON document into a snapshot.

    Documents that are not valid JSON objects yield an empty snapshot with no
    update time; entries of the stock list that are not objects are skipped.
    """
    market_data = MarketData()
    try:
        root = json.loads(data)
    except (ValueError, UnicodeDecodeError):
        return market_data
    if not isinstance(root, dict):
        return market_data

    stocks = root.get("stocks")
    if isinstance(stocks, list):
        for entry in stocks:
            if isinstance(entry, dict):
                market_data.add_or_update_stock(_parse_stock(entry, now))

    market_data.update_time = now
    return market_data


def _base_price(code: str, rng: random.Random) -> float:
    for prefixes, low, high in _BASE_PRICE_RANGES:
        if code.startswith(prefixes):
            return rng.uniform(low, high)
    return 0.0


def _simulate_kline(previous_close: float, rng: random.Random, now: datetime) -> list[StockTradeData]:
    start = now - timedelta(days=KLINE_DAYS)
    last_close = previous_close * 0.9
    candles: list[StockTradeData] = []
    for day in range(KLINE_DAYS):
        daily_change = rng.uniform(-0.05, 0.05)
        open_ = last_close * (1.0 + rng.uniform(-0.01, 0.01))
        close = last_close * (1.0 + daily_change)
        high = max(open_, close) * (1.0 + rng.uniform(0.0, 0.03))
        low = min(open_, close) * (1.0 - rng.uniform(0.0, 0.03))
        volume = rng.randrange(500_000, 5_000_000)
        candles.append(
            StockTradeData(
                timestamp=start + timedelta(days=day),
                open=open_,
                high=high,
                low=low,
                close=close,
                volume=volume,
                amount=volume * (high + low) / 2,
            )
        )
        last_close = close
    return candles


def _simulate_intraday(open_price: float, rng: random.Random, now: datetime) -> list[TimeSeriesPoint]:
    midnight = datetime.combine(now.date(), time(0, 0), tzinfo=now.tzinfo)
    last_price = open_price
    points: list[TimeSeriesPoint] = []
    for session_open in (MORNING_OPEN, AFTERNOON_OPEN):
        session_start = midnight + timedelta(hours=session_open.hour, minutes=session_open.minute)
        for minute in range(SESSION_MINUTES):
            price = last_price * (1.0 + rng.uniform(-0.005, 0.005))
            points.append(
                TimeSeriesPoint(
                    timestamp=session_start + timedelta(minutes=minute),
                    price=price,
                    volume=rng.randrange(10_000, 100_000),
                )
            )
            last_price = price
    return points


def _simulate_stock(code: str, name: str, rng: random.Random, now: datetime) -> StockItem:
    item = StockItem.from_code(code, name)
    base = _base_price(code, rng)

    previous_close = base * (1.0 + rng.uniform(-0.02, 0.02))
    current = previous_close * (1.0 + rng.uniform(-0.1, 0.1))
    open_price = previous_close * (1.0 + rng.uniform(-0.03, 0.03))
    high = max(current, open_price) * (1.0 + rng.uniform(0.0, 0.05))
    low = min(current, open_price) * (1.0 - rng.uniform(0.0, 0.05))
    volume = rng.randrange(100_000, 10_000_000)

    item.previous_close = previous_close
    item.current_price = current
    item.open_price = open_price
    item.high_price = high
    item.low_price = low
    item.volume = volume
    item.amount = volume * current
    item.update_time = now
    item.kline_data = _simulate_kline(previous_close, rng, now)
    item.time_series_data = _simulate_intraday(open_price, rng, now)
    return item


def generate_simulated_data(
    stocks: Mapping[str, str], rng: random.Random, now: datetime
) -> MarketData:
    """Build a random snapshot for ``stocks`` (code to name), with candles and intraday points."""
    market_data = MarketData(update_time=now)
    for code in sorted(stocks):
        market_data.add_or_update_stock(_simulate_stock(code, stocks[code], rng, now))
    return market_data


def _urlopen(url: str) -> bytes:
    request = urllib.request.Request(url, headers={"Content-Type": "application/json"})
    with urllib.request.urlopen(request, timeout=10) as response:
        return response.read()


class DataProvider:
    """Produces market snapshots and emits them on ``data_received``.

    In simulated mode a snapshot is generated on start and then on every timer
    tick; otherwise quotes are fetched from ``url`` with ``opener``.
    """

    def __init__(
        self,
        *,
        use_simulated_data: bool = True,
        url: str = DEFAULT_QUOTES_URL,
        stocks: Mapping[str, str] | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = datetime.now,
        opener: Callable[[str], bytes] = _urlopen,
        simulate_interval_ms: int = SIMULATE_INTERVAL_MS,
    ) -> None:
        self.data_received = Signal()
        self.use_simulated_data = use_simulated_data
        self.url = url
        self.stocks = dict(SIMULATED_STOCKS if stocks is None else stocks)
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock
        self._opener = opener
        self._simulate_interval_ms = simulate_interval_ms
        self._running = False
        self._timer = RepeatingTimer()
        self._timer.timeout.connect(self._on_simulate_timer)

    @property
    def is_running(self) -> bool:
        """True between start and stop."""
        return self._running

    def start(self) -> None:
        """Begin producing data; does nothing if already running."""
        if self._running:
            return
        self._running = True
        if self.use_simulated_data:
            self._emit_simulated()
            self._timer.start(self._simulate_interval_ms)
        else:
            self._fetch_logged()

    def stop(self) -> None:
        """Stop producing data."""
        if not self._running:
            return
        self._running = False
        self._timer.stop()

    def on_refresh_requested(self) -> None:
        """Produce a fresh snapshot right away, if running."""
        if not self._running:
            return
        if self.use_simulated_data:
            self._emit_simulated()
        else:
            self._fetch_logged()

    def fetch(self, url: str | None = None) -> MarketData:
        """Download and parse quotes, emit them and return them.

        Raises QuoteFetchError when the request fails.
        """
        target = self.url if url is None else url
        try:
            payload = self._opener(target)
        except (OSError, ValueError) as exc:
            raise QuoteFetchError(f"failed to fetch {target}: {exc}") from exc
        market_data = parse_market_data(payload, self._clock())
        self.data_received.emit(market_data)
        return market_data

    def _fetch_logged(self) -> None:
        try:
            self.fetch()
        except QuoteFetchError as exc:
            logger.warning("Network error: %s", exc)

    def _emit_simulated(self) -> None:
        self.data_received.emit(generate_simulated_data(self.stocks, self._rng, self._clock()))

    def _on_simulate_timer(self) -> None:
        if self._running and self.use_simulated_data:
            self._emit_simulated()

    def __enter__(self) -> "DataProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()