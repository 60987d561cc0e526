"""Intraday and candlestick chart models for a single stock."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from quoteclient.events import Signal
from quoteclient.stockitem import StockItem, StockTradeData

AxisValue = Union[float, datetime, None]

NO_TIME_SERIES_TITLE = "无分时数据"
NO_KLINE_TITLE = "无K线数据"
TIME_SERIES_SUFFIX = "分时图"

INTRADAY_TIME_FORMAT = "%H:%M"
DAILY_TIME_FORMAT = "%m-%d"
PRICE_LABEL_FORMAT = "%.2f"
VOLUME_LABEL_FORMAT = "%d"

PRICE_MARGIN_LOW = 0.98
PRICE_MARGIN_HIGH = 1.02
VOLUME_HEADROOM = 1.1

_SPARK_CHARS = "▁▂▃▄▅▆▇█"
_SPARK_WIDTH = 80


class ChartType(Enum):
    """Which kind of chart is shown."""

    TIME_SERIES = "time_series"
    CANDLESTICK = "candlestick"


class PeriodType(Enum):
    """Candle period of the candlestick chart."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    MINUTES = "minutes"
    MINUTES5 = "minutes5"
    MINUTES15 = "minutes15"
    MINUTES30 = "minutes30"
    MINUTES60 = "minutes60"


_PERIOD_LABELS: dict[PeriodType, str] = {
    PeriodType.DAY: "日K",
    PeriodType.WEEK: "周K",
    PeriodType.MONTH: "月K",
    PeriodType.MINUTES: "分钟K",
    PeriodType.MINUTES5: "5分钟K",
    PeriodType.MINUTES15: "15分钟K",
    PeriodType.MINUTES30: "30分钟K",
    PeriodType.MINUTES60: "60分钟K",
}

# Order of the entries of the period selector.
PERIOD_CHOICES: tuple[PeriodType, ...] = (
    PeriodType.DAY,
    PeriodType.WEEK,
    PeriodType.MONTH,
    PeriodType.MINUTES,
    PeriodType.MINUTES5,
    PeriodType.MINUTES15,
    PeriodType.MINUTES30,
    PeriodType.MINUTES60,
)

_DAILY_PERIODS = frozenset({PeriodType.DAY, PeriodType.WEEK, PeriodType.MONTH})


def period_label(period: PeriodType) -> str:
    """The title label of a candle period."""
    return _PERIOD_LABELS[period]


@dataclass(frozen=True)
class Axis:
    """Range, label format and tick count of one chart axis."""

    minimum: AxisValue
    maximum: AxisValue
    label_format: str
    tick_count: int

    def format_value(self, value: AxisValue) -> str:
        """Render a value with this axis's label format."""
        if value is None:
            return "-"
        if isinstance(value, datetime):
            return value.strftime(self.label_format)
        return self.label_format % value


@dataclass
class ChartSpec:
    """Everything needed to draw a chart: title, axes and series."""

    title: str
    chart_type: ChartType | None = None
    time_axis: Axis | None = None
    price_axis: Axis | None = None
    volume_axis: Axis | None = None
    price_points: list[tuple[datetime | None, float]] = field(default_factory=list)
    candles: list[StockTradeData] = field(default_factory=list)
    volumes: list[int] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        """True when the chart carries any series."""
        return bool(self.price_points or self.candles)


def _price_axis(minimum: float, maximum: float) -> Axis:
    return Axis(minimum, maximum, PRICE_LABEL_FORMAT, 5)


def _volume_axis(volumes: list[int]) -> Axis:
    max_volume = max((volume for volume in volumes if volume > 0), default=0)
    return Axis(0.0, max_volume * VOLUME_HEADROOM, VOLUME_LABEL_FORMAT, 3)


def build_time_series_chart(stock: StockItem) -> ChartSpec:
    """Intraday price line with volume bars for a stock."""
    points = stock.time_series_data
    if not points:
        return ChartSpec(title=NO_TIME_SERIES_TITLE)

    volumes = [point.volume for point in points]
    return ChartSpec(
        title=f"{stock.name} {TIME_SERIES_SUFFIX}",
        chart_type=ChartType.TIME_SERIES,
        time_axis=Axis(points[0].timestamp, points[-1].timestamp, INTRADAY_TIME_FORMAT, 6),
        price_axis=_price_axis(
            stock.low_price * PRICE_MARGIN_LOW, stock.high_price * PRICE_MARGIN_HIGH
        ),
        volume_axis=_volume_axis(volumes),
        price_points=[(point.timestamp, point.price) for point in points],
        volumes=volumes,
    )


def build_candlestick_chart(stock: StockItem, period: PeriodType) -> ChartSpec:
    """Candles with volume bars for a stock, titled with the period."""
    candles = stock.kline_data
    if not candles:
        return ChartSpec(title=NO_KLINE_TITLE)

    min_price = stock.low_price * PRICE_MARGIN_LOW
    max_price = stock.high_price * PRICE_MARGIN_HIGH
    for candle in candles:
        if candle.low < min_price:
            min_price = candle.low * PRICE_MARGIN_LOW
        if candle.high > max_price:
            max_price = candle.high * PRICE_MARGIN_HIGH

    time_format = DAILY_TIME_FORMAT if period in _DAILY_PERIODS else INTRADAY_TIME_FORMAT
    volumes = [candle.volume for candle in candles]
    return ChartSpec(
        title=f"{stock.name} {period_label(period)}",
        chart_type=ChartType.CANDLESTICK,
        time_axis=Axis(candles[0].timestamp, candles[-1].timestamp, time_format, 6),
        price_axis=_price_axis(min_price, max_price),
        volume_axis=_volume_axis(volumes),
        candles=list(candles),
        volumes=volumes,
    )


def _info_color(change_percent: float) -> str:
    if change_percent > 0:
        return "red"
    if change_percent < 0:
        return "green"
    return "black"


def _spark_char(value: float, low: float, high: float) -> str:
    if high <= low:
        return _SPARK_CHARS[0]
    ratio = min(max((value - low) / (high - low), 0.0), 1.0)
    return _SPARK_CHARS[round(ratio * (len(_SPARK_CHARS) - 1))]


def _thin(count: int) -> range:
    step = max(1, -(-count // _SPARK_WIDTH))
    return range(0, count, step)


class QuoteChart:
    """Chart state for the selected stock.

    ``stock_changed`` is emitted with the current code whenever the chart
    needs fresh data for it, after a change of chart type or period.
    """

    def __init__(self) -> None:
        self.stock_changed = Signal()
        self._chart_type = ChartType.TIME_SERIES
        self._period_type = PeriodType.DAY
        self._current_code = ""
        self._info_text = ""
        self._info_color = "black"
        self._spec: ChartSpec | None = None

    @property
    def chart_type(self) -> ChartType:
        """The kind of chart shown."""
        return self._chart_type

    @property
    def period_type(self) -> PeriodType:
        """The candle period."""
        return self._period_type

    @property
    def current_code(self) -> str:
        """Code of the stock last drawn, or an empty string."""
        return self._current_code

    @property
    def info_text(self) -> str:
        """Name, code, price and change of the stock last drawn."""
        return self._info_text

    @property
    def info_color(self) -> str:
        """Colour of the info line: red rising, green falling, black flat."""
        return self._info_color

    @property
    def spec(self) -> ChartSpec | None:
        """The chart as last built, or None before any stock was drawn."""
        return self._spec

    @property
    def time_series_checked(self) -> bool:
        """Whether the intraday button is checked."""
        return self._chart_type is ChartType.TIME_SERIES

    @property
    def candlestick_checked(self) -> bool:
        """Whether the candlestick button is checked."""
        return self._chart_type is ChartType.CANDLESTICK

    def update_chart(self, stock: StockItem) -> None:
        """Draw the stock with the current chart type."""
        self._current_code = stock.code
        change_percent = stock.change_percent
        self._info_text = (
            f"{stock.name} ({stock.code}) {stock.current_price:.2f} "
            f"{stock.change:.2f} ({change_percent:.2f}%)"
        )
        self._info_color = _info_color(change_percent)
        if self._chart_type is ChartType.TIME_SERIES:
            self._spec = build_time_series_chart(stock)
        else:
            self._spec = build_candlestick_chart(stock, self._period_type)

    def set_chart_type(self, chart_type: ChartType) -> None:
        """Switch chart type; asks for the current stock again when there is one."""
        if chart_type is self._chart_type:
            return
        self._chart_type = chart_type
        if self._current_code:
            self.clear_chart()
            self.stock_changed.emit(self._current_code)

    def set_period_type(self, period: PeriodType) -> None:
        """Switch candle period; asks for the stock again when candles are shown."""
        if period is self._period_type:
            return
        self._period_type = period
        if self._chart_type is ChartType.CANDLESTICK and self._current_code:
            self.stock_changed.emit(self._current_code)

    def on_period_changed(self, index: int) -> None:
        """Apply the period at this position of the selector; others are ignored."""
        if 0 <= index < len(PERIOD_CHOICES):
            self.set_period_type(PERIOD_CHOICES[index])

    def on_time_series_button_clicked(self) -> None:
        """Show the intraday chart."""
        self.set_chart_type(ChartType.TIME_SERIES)

    def on_candlestick_button_clicked(self) -> None:
        """Show the candlestick chart."""
        self.set_chart_type(ChartType.CANDLESTICK)

    def clear_chart(self) -> None:
        """Drop all series and axes, keeping only the title."""
        if self._spec is not None:
            self._spec = ChartSpec(title=self._spec.title)

    def render(self) -> Panel:
        """A rich panel with the info line, axis ranges and a sparkline."""
        spec = self._spec
        parts: list[Text] = [Text(self._info_text, style=f"bold {self._info_color}")]
        if spec is None:
            return Panel(Group(*parts))

        if spec.time_axis and spec.price_axis and spec.volume_axis:
            time_axis, price_axis, volume_axis = spec.time_axis, spec.price_axis, spec.volume_axis
            parts.append(
                Text(
                    f"{time_axis.format_value(time_axis.minimum)} - "
                    f"{time_axis.format_value(time_axis.maximum)}  "
                    f"价格 {price_axis.format_value(price_axis.minimum)} - "
                    f"{price_axis.format_value(price_axis.maximum)}  "
                    f"成交量 ≤ {volume_axis.format_value(volume_axis.maximum)}"
                )
            )
            parts.append(self._sparkline(spec, price_axis))
        return Panel(Group(*parts), title=spec.title)

    @staticmethod
    def _sparkline(spec: ChartSpec, price_axis: Axis) -> Text:
        low = float(price_axis.minimum or 0.0)
        high = float(price_axis.maximum or 0.0)
        line = Text()
        if spec.candles:
            for index in _thin(len(spec.candles)):
                candle = spec.candles[index]
                style = "red" if candle.close >= candle.open else "green"
                line.append(_spark_char(candle.close, low, high), style=style)
        else:
            for index in _thin(len(spec.price_points)):
                line.append(_spark_char(spec.price_points[index][1], low, high))
        return line