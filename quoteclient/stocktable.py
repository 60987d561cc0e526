"""Tabular view of a market snapshot with sorting, selection and copying."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import IntEnum
from typing import Union

from rich.table import Table
from rich.text import Text

from quoteclient.events import Signal
from quoteclient.marketdata import MarketData
from quoteclient.stockitem import StockItem

RGB = tuple[int, int, int]
SortValue = Union[str, int, float]

RISING_COLOR: RGB = (255, 0, 0)
FALLING_COLOR: RGB = (0, 128, 0)
FLAT_COLOR: RGB = (0, 0, 0)

WAN = "万"


class Column(IntEnum):
    """Columns of the stock table, in display order."""

    CODE = 0
    NAME = 1
    PRICE = 2
    CHANGE = 3
    CHANGE_PERCENT = 4
    OPEN = 5
    HIGH = 6
    LOW = 7
    VOLUME = 8
    AMOUNT = 9

    @property
    def header(self) -> str:
        """The column's header label."""
        return _HEADERS[self]


_HEADERS: dict[Column, str] = {
    Column.CODE: "代码",
    Column.NAME: "名称",
    Column.PRICE: "当前价",
    Column.CHANGE: "涨跌额",
    Column.CHANGE_PERCENT: "涨跌幅",
    Column.OPEN: "开盘价",
    Column.HIGH: "最高价",
    Column.LOW: "最低价",
    Column.VOLUME: "成交量",
    Column.AMOUNT: "成交额",
}


@dataclass(frozen=True)
class TableCell:
    """Displayed text of a cell, the value it sorts by, and its colour."""

    text: str
    sort_value: SortValue
    color: RGB


Row = tuple[TableCell, ...]


def stock_color(change_percent: float) -> RGB:
    """Red for a rise, green for a fall, black when flat."""
    if change_percent > 0:
        return RISING_COLOR
    if change_percent < 0:
        return FALLING_COLOR
    return FLAT_COLOR


def _fixed(value: float, places: int) -> str:
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _build_row(stock: StockItem) -> Row:
    change_percent = stock.change_percent
    color = stock_color(change_percent)

    def cell(text: str, sort_value: SortValue) -> TableCell:
        return TableCell(text, sort_value, color)

    return (
        cell(stock.code, stock.code),
        cell(stock.name, stock.name),
        cell(_fixed(stock.current_price, 2), stock.current_price),
        cell(_fixed(stock.change, 2), stock.change),
        cell(_fixed(change_percent, 2) + "%", change_percent),
        cell(_fixed(stock.open_price, 2), stock.open_price),
        cell(_fixed(stock.high_price, 2), stock.high_price),
        cell(_fixed(stock.low_price, 2), stock.low_price),
        cell(_fixed(stock.volume / 10000.0, 0) + WAN, stock.volume),
        cell(_fixed(stock.amount / 10000.0, 0) + WAN, stock.amount),
    )


class StockTable:
    """Rows of quotes, kept sorted, with a single current cell.

    ``stock_selected`` is emitted with the stock code whenever the current
    cell moves to a different position.
    """

    def __init__(self) -> None:
        self.stock_selected = Signal()
        self._rows: list[Row] = []
        self._sort_column = Column.CHANGE_PERCENT
        self._descending = True
        self._current: tuple[int, int] | None = None

    @property
    def rows(self) -> list[Row]:
        """The rows in their current display order."""
        return list(self._rows)

    @property
    def sort_column(self) -> Column:
        """The column the rows are sorted by."""
        return self._sort_column

    @property
    def descending(self) -> bool:
        """True when the sort order is descending."""
        return self._descending

    @property
    def current(self) -> tuple[int, int] | None:
        """The (row, column) of the current cell, or None."""
        return self._current

    @property
    def current_code(self) -> str | None:
        """Code of the stock on the current row, or None without a selection."""
        if self._current is None:
            return None
        return self._rows[self._current[0]][Column.CODE].text

    def update_data(self, market_data: MarketData) -> None:
        """Replace all rows with the snapshot, keeping the selected stock selected."""
        previous_code = self.current_code
        column = self._current[1] if self._current is not None else Column.CODE
        self._current = None
        self._rows = [_build_row(stock) for stock in market_data.stocks().values()]
        self._sort()
        if previous_code is not None:
            row = self._find_row(previous_code)
            if row is not None:
                self._set_current(row, column)

    def sort_by_column(self, column: int, descending: bool = False) -> None:
        """Sort rows by a column; the current cell follows its stock."""
        self._sort_column = Column(column)
        self._descending = descending
        code = self.current_code
        self._sort()
        if code is not None and self._current is not None:
            row = self._find_row(code)
            self._current = None if row is None else (row, self._current[1])

    def select_row(self, row: int, column: int = Column.CODE) -> None:
        """Make the given cell current; IndexError when it lies outside the table."""
        if not 0 <= row < len(self._rows):
            raise IndexError(f"row {row} out of range")
        if not 0 <= column < len(Column):
            raise IndexError(f"column {column} out of range")
        self._set_current(row, int(column))

    def copy_selected_cell(self) -> str | None:
        """Text of the current cell, or None without a selection."""
        if self._current is None:
            return None
        row, column = self._current
        return self._rows[row][column].text

    def copy_selected_row(self) -> str | None:
        """Tab-separated text of the current row, or None without a selection."""
        if self._current is None:
            return None
        return "\t".join(cell.text for cell in self._rows[self._current[0]])

    def render(self) -> Table:
        """A rich table of the rows, coloured by movement, current row highlighted."""
        table = Table(show_lines=False)
        for column in Column:
            justify = "left" if column in (Column.CODE, Column.NAME) else "right"
            table.add_column(column.header, justify=justify)
        current_row = self._current[0] if self._current is not None else None
        for index, row in enumerate(self._rows):
            table.add_row(
                *(Text(cell.text, style="rgb({},{},{})".format(*cell.color)) for cell in row),
                style="reverse" if index == current_row else None,
            )
        return table

    def _sort(self) -> None:
        column = self._sort_column
        self._rows.sort(key=lambda row: row[column].sort_value, reverse=self._descending)

    def _find_row(self, code: str) -> int | None:
        return next(
            (index for index, row in enumerate(self._rows) if row[Column.CODE].text == code),
            None,
        )

    def _set_current(self, row: int, column: int) -> None:
        if self._current == (row, column):
            return
        self._current = (row, column)
        self.stock_selected.emit(self._rows[row][Column.CODE].text)

    def __len__(self) -> int:
        return len(self._rows)