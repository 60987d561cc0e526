"""Wires the data provider, data manager and main window together."""

from __future__ import annotations

import argparse
import random
import time
from collections.abc import Callable, Sequence
from datetime import datetime

from rich.console import Console
from rich.live import Live

from quoteclient.datamanager import DataManager
from quoteclient.dataprovider import DataProvider
from quoteclient.mainwindow import MainWindow

APPLICATION_NAME = "QuoteClient"
APPLICATION_VERSION = "1.0.0"
ORGANIZATION_NAME = "QuoteOrg"

_REDRAW_SECONDS = 1.0


class Application:
    """Creates the components and connects provider → manager → window."""

    def __init__(
        self,
        *,
        provider: DataProvider | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._given_provider = provider
        self._clock = clock
        self.data_provider: DataProvider | None = None
        self.data_manager: DataManager | None = None
        self.main_window: MainWindow | None = None

    def initialize(self) -> None:
        """Build and connect every component, start the data feed and show the window."""
        self.shutdown()
        provider = self._given_provider or DataProvider(clock=self._clock)
        manager = DataManager()
        provider.data_received.connect(manager.update_market_data)

        window = MainWindow(clock=self._clock)
        manager.market_data_updated.connect(window.update_ui)

        self.data_provider = provider
        self.data_manager = manager
        self.main_window = window

        provider.start()
        window.show()

    def shutdown(self) -> None:
        """Stop the data feed and any refresh timer."""
        if self.data_provider is not None:
            self.data_provider.stop()
        if self.data_manager is not None:
            self.data_manager.stop_auto_refresh()

    def __enter__(self) -> "Application":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=APPLICATION_NAME.lower(), description="Terminal stock quote client."
    )
    parser.add_argument(
        "--version", action="version", version=f"{APPLICATION_NAME} {APPLICATION_VERSION}"
    )
    parser.add_argument("--once", action="store_true", help="draw one frame and exit")
    parser.add_argument("--seed", type=int, default=None, help="seed for simulated quotes")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the quote client in the terminal until interrupted."""
    args = _parse_args(argv)
    provider = DataProvider(rng=random.Random(args.seed))
    console = Console()
    with Application(provider=provider) as app:
        app.initialize()
        window = app.main_window
        assert window is not None
        if args.once:
            console.print(window.render())
            return 0
        try:
            with Live(window.render(), console=console, screen=False) as live:
                while True:
                    time.sleep(_REDRAW_SECONDS)
                    live.update(window.render())
        except KeyboardInterrupt:
            pass
    return 0