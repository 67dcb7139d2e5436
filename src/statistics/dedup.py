"""
Deduplication Strategies

Several counting methodologies coexist because consumers compare
"total customers" figures computed under different keys. Each strategy
is only a key definition; the collapsing rule is shared:

- one record survives per distinct key value
- the survivor is the first record in store iteration order
- missing key parts are ordinary values (all-null keys form one group,
  null and "" are different keys)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import polars as pl


class DedupKey(str, Enum):
    """Selectable deduplication keys"""
    NONE = "none"
    CUSTOMER_ID = "customerId"
    EMAIL = "email"
    FULL_NAME = "fullName"
    NAME_EMAIL = "nameEmail"


@dataclass(frozen=True)
class DedupStrategy:
    """Key selector: the record columns whose combined value identifies a customer."""
    key: DedupKey
    columns: Tuple[str, ...]

    @property
    def name(self) -> str:
        return self.key.value

    @property
    def is_identity(self) -> bool:
        """Row-level strategy, nothing is collapsed."""
        return not self.columns


STRATEGIES: Dict[DedupKey, DedupStrategy] = {
    DedupKey.NONE: DedupStrategy(DedupKey.NONE, ()),
    DedupKey.CUSTOMER_ID: DedupStrategy(DedupKey.CUSTOMER_ID, ("customer_id",)),
    DedupKey.EMAIL: DedupStrategy(DedupKey.EMAIL, ("email",)),
    DedupKey.FULL_NAME: DedupStrategy(DedupKey.FULL_NAME, ("full_name",)),
    DedupKey.NAME_EMAIL: DedupStrategy(DedupKey.NAME_EMAIL, ("full_name", "email")),
}

StrategyLike = Union[DedupStrategy, DedupKey, str, None]


def get_strategy(key: StrategyLike) -> DedupStrategy:
    """
    Resolve a strategy from a key, its string value, or a strategy.

    None resolves to the row-level strategy.

    Raises:
        ValueError: If the key name is unknown
    """
    if isinstance(key, DedupStrategy):
        return key
    if key is None:
        return STRATEGIES[DedupKey.NONE]
    return STRATEGIES[DedupKey(key)]


def required_columns(strategy: DedupStrategy, *fields: str) -> List[str]:
    """Columns to project from the store: key columns first, then fields, no repeats."""
    columns: List[str] = []
    for column in (*strategy.columns, *fields):
        if column not in columns:
            columns.append(column)
    return columns


def deduplicate(frame: pl.DataFrame, strategy: StrategyLike) -> pl.DataFrame:
    """
    Collapse records sharing a key down to their first occurrence.

    Args:
        frame: Records in store iteration order
        strategy: Key to collapse on

    Returns:
        Frame with one row per distinct key value, original order kept
    """
    strategy = get_strategy(strategy)
    if strategy.is_identity or frame.height == 0:
        return frame
    return frame.unique(subset=list(strategy.columns), keep="first", maintain_order=True)


def count_unique(frame: pl.DataFrame, strategy: StrategyLike) -> int:
    """Size of the deduplicated population."""
    return deduplicate(frame, strategy).height


def count_all_variants(frame: pl.DataFrame) -> Dict[DedupKey, int]:
    """Population size under every strategy, for side-by-side comparison."""
    return {key: count_unique(frame, strategy) for key, strategy in STRATEGIES.items()}


def resolve_key(key: Optional[Union[DedupKey, str]], default: Union[DedupKey, str]) -> DedupStrategy:
    """Strategy for an optional request parameter, falling back to a configured default."""
    return get_strategy(key if key is not None else default)
