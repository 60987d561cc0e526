import threading

from quoteclient.datamanager import DEFAULT_REFRESH_INTERVAL_MS, DataManager
from quoteclient.marketdata import MarketData
from quoteclient.stockitem import MarketType, StockItem


def _snapshot() -> MarketData:
    data = MarketData()
    data.add_or_update_stock(StockItem.from_code("600000", "浦发银行"))
    data.add_or_update_stock(StockItem.from_code("000651", "格力电器"))
    data.add_or_update_stock(StockItem.from_code("300122", "智飞生物"))
    return data


def test_defaults():
    manager = DataManager()
    assert manager.refresh_interval == 5000
    assert DEFAULT_REFRESH_INTERVAL_MS == 5000
    assert len(manager.market_data) == 0
    assert not manager.is_auto_refreshing()


def test_update_market_data_stores_and_emits():
    manager = DataManager()
    received = []
    manager.market_data_updated.connect(received.append)
    data = _snapshot()
    manager.update_market_data(data)
    assert manager.market_data is data
    assert received == [data]


def test_lookups_delegate_to_snapshot():
    manager = DataManager()
    manager.update_market_data(_snapshot())
    stock = manager.get_stock("000651")
    assert stock is not None and stock.name == "格力电器"
    assert manager.get_stock("688111") is None
    assert manager.codes_by_market_type(MarketType.CHINEXT) == ["300122"]
    assert manager.codes_by_market_type(MarketType.STAR_MARKET) == []


def test_request_refresh_emits():
    manager = DataManager()
    count = []
    manager.refresh_requested.connect(lambda: count.append(1))
    manager.request_refresh()
    manager.request_refresh()
    assert len(count) == 2


def test_set_refresh_interval_ignores_non_positive():
    manager = DataManager()
    manager.set_refresh_interval(0)
    manager.set_refresh_interval(-100)
    assert manager.refresh_interval == DEFAULT_REFRESH_INTERVAL_MS
    manager.set_refresh_interval(250)
    assert manager.refresh_interval == 250


def test_auto_refresh_requests_refresh():
    manager = DataManager()
    fired = threading.Event()
    manager.refresh_requested.connect(fired.set)
    manager.set_refresh_interval(10)
    with manager:
        manager.start_auto_refresh()
        assert manager.is_auto_refreshing()
        assert fired.wait(2.0)
    assert not manager.is_auto_refreshing()


def test_changing_interval_while_running_keeps_running():
    manager = DataManager()
    manager.start_auto_refresh()
    try:
        manager.set_refresh_interval(20)
        assert manager.is_auto_refreshing()
        fired = threading.Event()
        manager.refresh_requested.connect(fired.set)
        assert fired.wait(2.0)
    finally:
        manager.stop_auto_refresh()
    assert not manager.is_auto_refreshing()


def test_stop_without_start_is_harmless():
    manager = DataManager()
    manager.stop_auto_refresh()
    assert not manager.is_auto_refreshing()
    manager.start_auto_refresh()
    manager.start_auto_refresh()
    assert manager.is_auto_refreshing()
    manager.stop_auto_refresh()
    assert not manager.is_auto_refreshing()