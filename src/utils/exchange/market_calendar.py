"""Immutable registry of every supported market, keyed by MIC."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping

from src.utils.exchange.market_config import MarketConfig
from src.utils.io.json_manager import JsonManager
from src.utils.io.logger import Logger


class UnknownMarketError(KeyError):
    """Raised when a MIC is not part of the registry."""

    def __init__(self, mic: str, supported: List[str]) -> None:
        super().__init__(mic)
        self.mic = mic
        self.supported = supported

    def __str__(self) -> str:
        return f"Unsupported exchange: {self.mic}"


class MarketCalendar:
    """Read-only lookup of :class:`MarketConfig` by market identifier.

    Built once at process start and shared by reference; there is no way to add or replace
    a market afterwards.
    """

    __slots__ = ("_markets",)

    def __init__(self, markets: Iterable[MarketConfig]) -> None:
        registry: Dict[str, MarketConfig] = {}
        for market in markets:
            if not isinstance(market, MarketConfig):
                raise TypeError("`markets` must only contain `MarketConfig` instances")
            if market.mic in registry:
                raise ValueError(f"Parameter 'markets' has duplicated items: {market.mic}")
            registry[market.mic] = market
        if len(registry) == 0:
            raise ValueError("Parameter 'markets' is empty")
        self._markets: Mapping[str, MarketConfig] = MappingProxyType(registry)

    def __contains__(self, mic: object) -> bool:
        return mic in self._markets

    def __len__(self) -> int:
        return len(self._markets)

    def get(self, mic: str) -> MarketConfig:
        """Return the calendar of *mic* or raise :class:`UnknownMarketError`."""
        try:
            return self._markets[mic]
        except KeyError as exc:
            raise UnknownMarketError(mic, self.supported()) from exc

    def supported(self) -> List[str]:
        """Return every known MIC in registry order."""
        return list(self._markets)

    def directory(self) -> List[Dict[str, str]]:
        """Return the public ``{mic, name, timezone}`` listing."""
        return [m.to_directory_json() for m in self._markets.values()]

    @staticmethod
    def from_parameter(markets: Any) -> MarketCalendar:
        """Build the registry from the ``{MIC: entry}`` mapping of ``markets.json``."""
        if markets is None:
            raise ValueError("Parameter 'markets' is not defined")
        if not isinstance(markets, dict):
            raise ValueError(f"Parameter 'markets' is invalid: {markets}")
        return MarketCalendar(
            MarketConfig.from_parameter(mic, entry) for mic, entry in markets.items()
        )

    @staticmethod
    def load(filepath: str) -> MarketCalendar:
        """Load and validate the registry from a JSON file."""
        calendar = MarketCalendar.from_parameter(JsonManager.load_strict(filepath))
        Logger.debug(
            f"Loaded {len(calendar)} market calendars: {', '.join(calendar.supported())}"
        )
        return calendar
