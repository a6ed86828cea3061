"""
Pluggable price history sources.

The backtester depends on price data only through the PriceSource
capability: fetch(symbol_pair, start, end, granularity) -> observations.
Adapters cover in-memory fixtures and synthetic data, JSON files on disk,
and are wrapped by PriceHistoryService for logging and error translation.
"""

import random
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Union

import structlog

from ..backtest.models import PriceObservation
from ..errors import DataQualityError, MissingPriceDataError, PriceSourceError
from ..utils.time import ensure_utc, get_current_time
from .parsers import parse_price_document

logger = structlog.get_logger(__name__)

GRANULARITIES: dict[str, timedelta] = {
    "1d": timedelta(days=1),
    "4h": timedelta(hours=4),
    "1h": timedelta(hours=1),
}

BASE_PRICES: dict[str, float] = {
    "BTC-USDC": 45000.0,
    "ETH-USDC": 3000.0,
    "GOLD-USD": 2000.0,
}


def granularity_step(granularity: str) -> timedelta:
    """Observation spacing for a granularity code."""
    try:
        return GRANULARITIES[granularity]
    except KeyError as e:
        raise ValueError(f"Unsupported granularity: {granularity!r}") from e


def _within(observations: Iterable[PriceObservation], start: datetime, end: datetime) -> list[PriceObservation]:
    start, end = ensure_utc(start), ensure_utc(end)
    return sorted(
        (obs for obs in observations if start <= obs.ts <= end),
        key=lambda obs: obs.ts,
    )


class PriceSource(ABC):
    """Base class for price history adapters."""

    name = "base"

    @abstractmethod
    def fetch(
        self,
        symbol_pair: str,
        start: datetime,
        end: datetime,
        granularity: str = "1d",
    ) -> list[PriceObservation]:
        """
        Fetch observations for a symbol pair within [start, end].

        Returns:
            Observations ascending by timestamp; gaps are expected
        """
        pass

    def health_check(self) -> bool:
        """Check if the source can serve requests."""
        return True


class InMemoryPriceSource(PriceSource):
    """Price source over in-process data, used for tests and development."""

    name = "in_memory"

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], list[PriceObservation]] = {}

    def load(
        self,
        symbol_pair: str,
        observations: Iterable[PriceObservation],
        granularity: str = "1d",
    ) -> None:
        """Replace the stored series for a pair and granularity."""
        self._data[(symbol_pair, granularity)] = sorted(observations, key=lambda obs: obs.ts)

    def seed_synthetic(
        self,
        symbol_pair: str,
        start: datetime,
        end: datetime,
        granularity: str = "1d",
        base_price: Optional[float] = None,
        volatility: float = 0.02,
        seed: int = 0,
    ) -> list[PriceObservation]:
        """
        Generate a deterministic random-walk series and store it.

        Args:
            symbol_pair: Pair key, e.g. "BTC-USDC"
            start: First observation instant
            end: Last possible observation instant
            granularity: Observation spacing code
            base_price: Starting price; defaults per known pair or 100
            volatility: Maximum relative move per observation
            seed: Random seed for reproducible series

        Returns:
            The generated observations
        """
        rng = random.Random(seed)
        step = granularity_step(granularity)
        price = base_price if base_price is not None else BASE_PRICES.get(symbol_pair, 100.0)
        floor = price * 0.1

        observations = []
        ts = ensure_utc(start)
        end = ensure_utc(end)
        while ts <= end:
            price = max(price * (1 + (rng.random() - 0.5) * volatility), floor)
            observations.append(PriceObservation(ts=ts, price=price))
            ts += step

        self.load(symbol_pair, observations, granularity)
        return observations

    @classmethod
    def with_synthetic_history(
        cls,
        pairs: Iterable[str],
        days: int = 365,
        now: Optional[datetime] = None,
        granularities: Iterable[str] = ("1d",),
    ) -> "InMemoryPriceSource":
        """Create a source pre-seeded with synthetic history for each pair."""
        source = cls()
        end = get_current_time(now).replace(hour=0, minute=0, second=0, microsecond=0)
        start = end - timedelta(days=days)
        pairs = list(pairs)
        for index, pair in enumerate(pairs):
            for granularity in granularities:
                source.seed_synthetic(pair, start, end, granularity, seed=index)

        logger.info(
            "In-memory price source initialized with synthetic data",
            pairs=len(pairs),
            days=days,
        )
        return source

    def fetch(
        self,
        symbol_pair: str,
        start: datetime,
        end: datetime,
        granularity: str = "1d",
    ) -> list[PriceObservation]:
        return _within(self._data.get((symbol_pair, granularity), []), start, end)


class JsonFilePriceSource(PriceSource):
    """Price source reading "<PAIR>-<granularity>.json" documents from a directory."""

    name = "json_file"

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, symbol_pair: str, granularity: str) -> Path:
        return self.directory / f"{symbol_pair}-{granularity}.json"

    def fetch(
        self,
        symbol_pair: str,
        start: datetime,
        end: datetime,
        granularity: str = "1d",
    ) -> list[PriceObservation]:
        path = self.path_for(symbol_pair, granularity)
        if not path.exists():
            return []

        return _within(parse_price_document(path.read_bytes()), start, end)

    def health_check(self) -> bool:
        return self.directory.is_dir()


class PriceHistoryService:
    """Fetches price series through a pluggable adapter."""

    def __init__(self, adapter: Optional[PriceSource] = None):
        self.adapter = adapter or InMemoryPriceSource()

    def set_adapter(self, adapter: PriceSource) -> None:
        """Swap the price history adapter."""
        self.adapter = adapter

    def get_observations(
        self,
        symbol_pair: str,
        start: datetime,
        end: datetime,
        granularity: str = "1d",
    ) -> list[PriceObservation]:
        """
        Fetch a price series for a pair and range.

        Raises:
            MalformedDataError: If the adapter returned unparseable rows
            PriceSourceError: If the adapter failed for any other reason
        """
        logger.info(
            "Fetching price observations",
            source=self.adapter.name,
            symbol_pair=symbol_pair,
            start=ensure_utc(start).isoformat(),
            end=ensure_utc(end).isoformat(),
            granularity=granularity,
        )

        try:
            observations = self.adapter.fetch(symbol_pair, start, end, granularity)
        except DataQualityError:
            raise
        except Exception as e:
            logger.error("Price source fetch failed", source=self.adapter.name,
                         symbol_pair=symbol_pair, error=str(e))
            raise PriceSourceError(
                f"Price source {self.adapter.name} failed: {e}",
                source=self.adapter.name,
                symbol_pair=symbol_pair,
            ) from e

        logger.info("Price observations fetched", symbol_pair=symbol_pair,
                    count=len(observations), granularity=granularity)
        return observations

    def latest_price(self, symbol_pair: str, now: Optional[datetime] = None) -> float:
        """
        Close of the most recent observation within the last day.

        Raises:
            MissingPriceDataError: If no observation exists in that window
        """
        end = get_current_time(now)
        observations = self.get_observations(symbol_pair, end - timedelta(days=1), end, "1d")
        if not observations:
            raise MissingPriceDataError(f"No price data available for {symbol_pair}",
                                        symbol_pair=symbol_pair)
        return observations[-1].price
