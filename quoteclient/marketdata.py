"""A snapshot of quotes for a set of stocks, keyed by code."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

from quoteclient.stockitem import MarketType, StockItem


class MarketData:
    """Stocks keyed by code, kept in code order, plus the snapshot time."""

    def __init__(self, update_time: datetime | None = None) -> None:
        self._stocks: dict[str, StockItem] = {}
        self.update_time = update_time

    def get_stock(self, code: str) -> StockItem | None:
        """Return the stock with this code, or None."""
        return self._stocks.get(code)

    def add_or_update_stock(self, stock: StockItem) -> None:
        """Store a stock, replacing any with the same code."""
        self._stocks[stock.code] = stock

    def remove_stock(self, code: str) -> None:
        """Drop a stock; unknown codes are ignored."""
        self._stocks.pop(code, None)

    def codes(self) -> list[str]:
        """All stock codes in ascending order."""
        return sorted(self._stocks)

    def stocks(self) -> dict[str, StockItem]:
        """All stocks, ordered by code."""
        return {code: self._stocks[code] for code in sorted(self._stocks)}

    def codes_by_market_type(self, market_type: MarketType) -> list[str]:
        """Codes of the stocks on the given market, in ascending order."""
        return [
            code
            for code in sorted(self._stocks)
            if self._stocks[code].market_type is market_type
        ]

    def clear(self) -> None:
        """Remove every stock."""
        self._stocks.clear()

    def __len__(self) -> int:
        return len(self._stocks)

    def __contains__(self, code: object) -> bool:
        return code in self._stocks

    def __iter__(self) -> Iterator[StockItem]:
        return iter(self.stocks().values())