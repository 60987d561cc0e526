"""Stock quote records: market classification, candles and intraday points."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MarketType(Enum):
    """The board a stock is listed on."""

    UNKNOWN = "unknown"
    SHANGHAI_A = "shanghai_a"
    SHENZHEN_A = "shenzhen_a"
    CHINEXT = "chinext"
    STAR_MARKET = "star_market"


_CODE_PREFIXES: tuple[tuple[str, MarketType], ...] = (
    ("60", MarketType.SHANGHAI_A),
    ("00", MarketType.SHENZHEN_A),
    ("30", MarketType.CHINEXT),
    ("68", MarketType.STAR_MARKET),
)


def market_type_for_code(code: str) -> MarketType:
    """Classify a stock code by its two-character prefix."""
    for prefix, market_type in _CODE_PREFIXES:
        if code.startswith(prefix):
            return market_type
    return MarketType.UNKNOWN


@dataclass
class StockTradeData:
    """One candle of historical trading data."""

    timestamp: datetime | None = None
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    close: float = 0.0
    volume: int = 0
    amount: float = 0.0


@dataclass
class TimeSeriesPoint:
    """One intraday price sample."""

    timestamp: datetime | None = None
    price: float = 0.0
    volume: int = 0


@dataclass
class StockItem:
    """Everything known about a single stock."""

    code: str = ""
    name: str = ""
    market_type: MarketType = MarketType.UNKNOWN
    current_price: float = 0.0
    open_price: float = 0.0
    high_price: float = 0.0
    low_price: float = 0.0
    previous_close: float = 0.0
    volume: int = 0
    amount: float = 0.0
    kline_data: list[StockTradeData] = field(default_factory=list)
    time_series_data: list[TimeSeriesPoint] = field(default_factory=list)
    update_time: datetime | None = None

    @classmethod
    def from_code(cls, code: str, name: str) -> "StockItem":
        """Create a stock whose market type is derived from its code."""
        return cls(code=code, name=name, market_type=market_type_for_code(code))

    @property
    def change(self) -> float:
        """Price change against the previous close."""
        return self.current_price - self.previous_close

    @property
    def change_percent(self) -> float:
        """Percentage change against the previous close; 0 when that is not positive."""
        if self.previous_close <= 0.0:
            return 0.0
        return (self.current_price - self.previous_close) / self.previous_close * 100.0