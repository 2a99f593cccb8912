"""Feed catalog loading."""

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field


class Feed(BaseModel):
    symbol: str
    feed_id: str = Field(..., pattern=r"^0x[0-9a-fA-F]{64}$")
    expected_min: float | None = None
    expected_max: float | None = None

    def in_expected_range(self, price: float) -> bool | None:
        """None when the feed has no expected range configured."""
        if self.expected_min is None and self.expected_max is None:
            return None
        if self.expected_min is not None and price < self.expected_min:
            return False
        if self.expected_max is not None and price > self.expected_max:
            return False
        return True


class FeedCatalog(BaseModel):
    feeds: list[Feed] = Field(default_factory=list)


DEFAULT_FEEDS: list[Feed] = [
    Feed(
        symbol="ETH/USD",
        feed_id="0x000359843a543ee2fe414dc14c7e7920ef10f4372990b79d6361cdc0dd1ba782",
        expected_min=1500,
        expected_max=8000,
    ),
    Feed(
        symbol="BTC/USD",
        feed_id="0x00037da06d56d083fe599397a4769a042d63aa73dc4ef57709d31e9971a5b439",
        expected_min=30000,
        expected_max=150000,
    ),
]


def load_feed_catalog(path: str = "feeds.yaml") -> list[Feed]:
    p = Path(path)
    if not p.exists():
        return [feed.model_copy() for feed in DEFAULT_FEEDS]
    try:
        data = yaml.safe_load(p.read_text())
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    catalog = FeedCatalog.model_validate(data or {})
    if not catalog.feeds:
        raise ValueError(f"{path} must contain a non-empty list under 'feeds'")
    return catalog.feeds


def select_feeds(catalog: list[Feed], symbols: list[str] | None) -> list[Feed]:
    if not symbols:
        return list(catalog)
    by_symbol = {feed.symbol.lower(): feed for feed in catalog}
    selected: list[Feed] = []
    for symbol in symbols:
        feed = by_symbol.get(symbol.strip().lower())
        if feed is None:
            raise KeyError(f"Unknown feed symbol: {symbol}")
        selected.append(feed)
    return selected
