"""Main window: quote table, chart, toolbar state and status line."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime

from rich.console import Group
from rich.text import Text

from quoteclient.marketdata import MarketData
from quoteclient.quotechart import ChartType, QuoteChart
from quoteclient.stocktable import StockTable

WINDOW_TITLE = "证券行情客户端"
WINDOW_SIZE = (1024, 768)
TOOLBAR_TITLE = "工具栏"
READY_STATUS = "就绪"
REFRESHING_STATUS = "正在刷新数据..."
UPDATED_STATUS = "数据已更新 - {}"
STOCK_TYPE_LABEL = "股票类型: "
STOCK_TYPE_CHOICES: tuple[str, ...] = ("全部", "上证A股", "深证A股", "创业板", "科创板")
CLOCK_FORMAT = "%Y-%m-%d %H:%M:%S"
STATUS_TIME_FORMAT = "%H:%M:%S"


class MainWindow:
    """Ties the stock table to the quote chart and keeps the status line.

    Selecting a stock in the table makes it the charted stock; every market
    update refreshes the table and, when a stock is charted, the chart.
    """

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self.title = WINDOW_TITLE
        self.size = WINDOW_SIZE
        self.stock_table = StockTable()
        self.quote_chart = QuoteChart()
        self.stock_type_index = 0
        self.visible = False
        self._clock = clock
        self._status_text = READY_STATUS
        self._current_code = ""
        self._lock = threading.RLock()
        self.stock_table.stock_selected.connect(self.on_stock_selected)

    @property
    def status_text(self) -> str:
        """The message shown in the status bar."""
        return self._status_text

    @property
    def time_text(self) -> str:
        """The clock shown at the right of the status bar."""
        return self._clock().strftime(CLOCK_FORMAT)

    @property
    def current_stock_code(self) -> str:
        """Code of the selected stock, or an empty string."""
        return self._current_code

    @property
    def stock_type(self) -> str:
        """The label chosen in the stock type selector."""
        return STOCK_TYPE_CHOICES[self.stock_type_index]

    def show(self) -> None:
        """Mark the window as shown."""
        self.visible = True

    def update_ui(self, market_data: MarketData) -> None:
        """Show a new snapshot in the table and, for the selected stock, the chart."""
        with self._lock:
            self.stock_table.update_data(market_data)
            if self._current_code:
                stock = market_data.get_stock(self._current_code)
                if stock is not None:
                    self.quote_chart.update_chart(stock)
            self._status_text = UPDATED_STATUS.format(
                self._clock().strftime(STATUS_TIME_FORMAT)
            )

    def on_stock_selected(self, code: str) -> None:
        """Make ``code`` the charted stock and announce the change."""
        with self._lock:
            self._current_code = code
            self.quote_chart.stock_changed.emit(code)

    def show_time_series_chart(self) -> None:
        """Switch the chart to the intraday view."""
        with self._lock:
            self.quote_chart.set_chart_type(ChartType.TIME_SERIES)

    def show_candlestick_chart(self) -> None:
        """Switch the chart to the candlestick view."""
        with self._lock:
            self.quote_chart.set_chart_type(ChartType.CANDLESTICK)

    def refresh_data(self) -> None:
        """Note in the status bar that a refresh is under way."""
        with self._lock:
            self._status_text = REFRESHING_STATUS

    def render(self) -> Group:
        """A rich renderable of the whole window."""
        with self._lock:
            chart_type = self.quote_chart.chart_type
            toolbar = Text()
            toolbar.append("[刷新]")
            toolbar.append(" | ")
            toolbar.append(STOCK_TYPE_LABEL)
            toolbar.append(self.stock_type, style="bold")
            toolbar.append(" | ")
            toolbar.append(
                "[分时图]", style="reverse" if chart_type is ChartType.TIME_SERIES else None
            )
            toolbar.append(" ")
            toolbar.append(
                "[K线图]", style="reverse" if chart_type is ChartType.CANDLESTICK else None
            )
            status = Text(f"{self._status_text}    {self.time_text}", style="dim")
            return Group(
                Text(self.title, style="bold"),
                toolbar,
                self.stock_table.render(),
                self.quote_chart.render(),
                status,
            )