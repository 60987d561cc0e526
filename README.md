# quoteclient

A terminal quote client for A-share stocks. It keeps a table of quotes
(code, name, price, change, change percent, open, high, low, volume,
amount) and can build a time-series (分时图) or candlestick (K线图) chart
for a selected stock. Everything is drawn in the terminal with `rich`.
Rises are shown in red, falls in green and unchanged prices in black, as
is usual on Chinese markets.

## Running

```
quoteclient
```

This starts the data feed on simulated quotes for a fixed list of Shanghai
A, Shenzhen A, ChiNext and STAR Market stocks (`SIMULATED_STOCKS` in
`quoteclient.dataprovider`). A new snapshot is generated every three
seconds, and the screen is redrawn once a second until you press Ctrl+C.
The screen shows the window title, a toolbar line, the quote table, the
chart panel and a status line with the time of the last update and the
current clock.

Options:

- `--once` draws a single frame and exits.
- `--seed N` seeds the random generator for the simulated quotes, so runs are repeatable.
- `--version` prints `QuoteClient 1.0.0`.

## What it does not do

- The terminal screen takes no keyboard or mouse input. No stock can be
  selected from it, so the chart panel stays empty when the command runs.
  Charts are drawn once a stock is selected through the Python API, for
  example with `StockTable.select_row`.
- The stock type selector (`MainWindow.stock_type`) only records a label.
  It does not filter the table.
- The command always uses simulated data. Fetching real quotes needs a
  `DataProvider` built with `use_simulated_data=False` and a `url`. The
  default URL is only a placeholder.
- `Application` does not start the `DataManager` auto-refresh timer. It also
  does not connect the manager's `refresh_requested` signal to the provider.

## Using the pieces from Python

### Data model

```python
from quoteclient.stockitem import StockItem, MarketType, market_type_for_code
from quoteclient.marketdata import MarketData

stock = StockItem.from_code("600519", "贵州茅台")
assert stock.market_type is MarketType.SHANGHAI_A
assert market_type_for_code("300059") is MarketType.CHINEXT

data = MarketData()
data.add_or_update_stock(stock)
print(data.codes())
print(data.codes_by_market_type(MarketType.SHANGHAI_A))
```

The market type comes from the code prefix:

| Prefix | Market |
| --- | --- |
| `60` | Shanghai A |
| `00` | Shenzhen A |
| `30` | ChiNext |
| `68` | STAR Market |

Any other code is `MarketType.UNKNOWN`.

`StockItem.change` is the current price minus the previous close.
`StockItem.change_percent` is that change as a percentage of the previous
close, and 0 when the previous close is not positive.

`MarketData` also provides:

- `get_stock` and `remove_stock`.
- `stocks()`, which returns all stocks ordered by code.
- `clear()`.
- `len()`, `in` and iteration over the stocks.

### Data sources

`quoteclient.dataprovider.parse_market_data(data, now)` turns a JSON quote
document into a `MarketData`. The document is an object with a `stocks`
array. Each entry may carry `code`, `name`, `current`, `open`, `high`,
`low`, `previous`, `volume` and `amount`. Input that is not a JSON object
yields an empty snapshot.

`generate_simulated_data(stocks, rng, now)` builds a random snapshot from a
mapping of code to name. For each stock it produces 30 daily candles and a
minute-by-minute series for the 09:30–11:30 and 13:00–15:00 sessions.

```python
import random
from datetime import datetime
from quoteclient.dataprovider import SIMULATED_STOCKS, generate_simulated_data

snapshot = generate_simulated_data(SIMULATED_STOCKS, random.Random(1), datetime.now())
```

`DataProvider` emits snapshots on its `data_received` signal:

- `start()` sends one at once. In simulated mode it then sends one on every
  timer tick.
- `on_refresh_requested()` produces one immediately.
- `stop()` ends the feed.
- `fetch(url)` downloads and parses quotes. It raises `QuoteFetchError` when
  the request fails.

`quoteclient.datamanager.DataManager` holds the latest snapshot. It emits
`market_data_updated` from `update_market_data` and `refresh_requested` from
`request_refresh`. It can request refreshes on a timer with
`start_auto_refresh` and `stop_auto_refresh`. The default interval is
5000 ms, and `set_refresh_interval` ignores values that are not positive.

Signals and timers come from `quoteclient.events`:

- `Signal` has `connect`, `disconnect` and `emit`.
- `RepeatingTimer` runs in a background thread.

### Views

`quoteclient.stocktable.StockTable` keeps formatted rows, sorted by change
percent descending at first. When the data is updated, the selected stock
stays selected.

```python
from quoteclient.stocktable import Column, StockTable

table = StockTable()
table.update_data(snapshot)
table.sort_by_column(Column.CODE)
table.select_row(0)
print(table.current_code)
print(table.copy_selected_row())   # tab-separated cell texts
```

`quoteclient.quotechart.QuoteChart` turns a stock into a `ChartSpec`, which
holds the title, axes, price points or candles, and volumes. Switch the
view with `set_chart_type(ChartType.CANDLESTICK)` and the candle period
with `set_period_type`. The builders `build_time_series_chart` and
`build_candlestick_chart` can also be called on their own.

`quoteclient.mainwindow.MainWindow` joins the table and chart. Selecting a
row in its `stock_table` makes that stock the charted one.
`quoteclient.application.Application` connects provider, manager and window:

```python
from quoteclient.application import Application

with Application() as app:
    app.initialize()
    app.main_window.stock_table.select_row(0)
```

`StockTable.render()`, `QuoteChart.render()` and `MainWindow.render()`
return `rich` renderables that can be passed to `rich.console.Console.print`.