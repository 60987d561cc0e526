"""Holds the latest market snapshot and drives periodic refresh requests."""

from __future__ import annotations

from quoteclient.events import RepeatingTimer, Signal
from quoteclient.marketdata import MarketData
from quoteclient.stockitem import MarketType, StockItem

DEFAULT_REFRESH_INTERVAL_MS = 5000


class DataManager:
    """Keeps the current market data and announces updates and refresh requests.

    ``market_data_updated`` is emitted with the new snapshot after every update;
    ``refresh_requested`` is emitted on request and on every auto-refresh tick.
    """

    def __init__(self) -> None:
        self.market_data_updated = Signal()
        self.refresh_requested = Signal()
        self._market_data = MarketData()
        self._refresh_interval = DEFAULT_REFRESH_INTERVAL_MS
        self._timer = RepeatingTimer()
        self._timer.timeout.connect(self.request_refresh)

    @property
    def market_data(self) -> MarketData:
        """The most recent snapshot."""
        return self._market_data

    @property
    def refresh_interval(self) -> int:
        """Auto-refresh interval in milliseconds."""
        return self._refresh_interval

    def get_stock(self, code: str) -> StockItem | None:
        """Return the stock with this code from the current snapshot, or None."""
        return self._market_data.get_stock(code)

    def codes_by_market_type(self, market_type: MarketType) -> list[str]:
        """Codes in the current snapshot that belong to the given market."""
        return self._market_data.codes_by_market_type(market_type)

    def set_refresh_interval(self, msecs: int) -> None:
        """Change the auto-refresh interval; non-positive values are ignored."""
        if msecs <= 0:
            return
        self._refresh_interval = msecs
        if self._timer.is_active():
            self._timer.start(self._refresh_interval)

    def start_auto_refresh(self) -> None:
        """Begin requesting refreshes periodically, if not already doing so."""
        if not self._timer.is_active():
            self._timer.start(self._refresh_interval)

    def stop_auto_refresh(self) -> None:
        """Stop periodic refresh requests."""
        self._timer.stop()

    def is_auto_refreshing(self) -> bool:
        """True while periodic refresh requests are running."""
        return self._timer.is_active()

    def update_market_data(self, data: MarketData) -> None:
        """Replace the snapshot and announce it."""
        self._market_data = data
        self.market_data_updated.emit(self._market_data)

    def request_refresh(self) -> None:
        """Ask whoever listens for fresh data."""
        self.refresh_requested.emit()

    def __enter__(self) -> "DataManager":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop_auto_refresh()