"""
Aggregation Engine

Join & filter and group-by reduction shared by every report:

1. Left-join the sales facts to a dimension (a miss keeps the fact row
   with null dimension fields)
2. Drop undated sales where the aggregation is date-keyed
3. Group by the report key and reduce with a list of Metric specs
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class AggregationKind(str, Enum):
    """Reductions supported by the engine"""
    COUNT_DISTINCT = "count_distinct"
    COUNT = "count"
    SUM = "sum"
    MIN = "min"
    MAX = "max"
    MEAN = "mean"


@dataclass(frozen=True)
class Metric:
    """One output column of a group-by reduction"""
    name: str
    column: str
    kind: AggregationKind
    
    def expression(self) -> pl.Expr:
        """Polars aggregation expression for this metric"""
        col = pl.col(self.column)
        if self.kind == AggregationKind.COUNT_DISTINCT:
            # Nulls are not a distinct value
            expr = col.drop_nulls().n_unique()
        elif self.kind == AggregationKind.COUNT:
            expr = col.count()
        elif self.kind == AggregationKind.SUM:
            expr = col.sum()
        elif self.kind == AggregationKind.MIN:
            expr = col.min()
        elif self.kind == AggregationKind.MAX:
            expr = col.max()
        elif self.kind == AggregationKind.MEAN:
            expr = col.mean()
        else:
            raise ValueError(f"Unsupported aggregation: {self.kind}")
        return expr.alias(self.name)


def count_distinct(column: str, name: str) -> Metric:
    return Metric(name=name, column=column, kind=AggregationKind.COUNT_DISTINCT)


def count(column: str, name: str) -> Metric:
    return Metric(name=name, column=column, kind=AggregationKind.COUNT)


def total(column: str, name: str) -> Metric:
    return Metric(name=name, column=column, kind=AggregationKind.SUM)


def earliest(column: str, name: str) -> Metric:
    return Metric(name=name, column=column, kind=AggregationKind.MIN)


def latest(column: str, name: str) -> Metric:
    return Metric(name=name, column=column, kind=AggregationKind.MAX)


def mean(column: str, name: str) -> Metric:
    return Metric(name=name, column=column, kind=AggregationKind.MEAN)


def drop_undated(df: pl.DataFrame, date_column: str = "order_date") -> pl.DataFrame:
    """Exclude rows without a transaction date"""
    dated = df.filter(pl.col(date_column).is_not_null())
    excluded = df.height - dated.height
    if excluded:
        logger.info("Excluded undated sales", rows=excluded, column=date_column)
    return dated


def join_dimension(
    facts: pl.DataFrame,
    dimension: pl.DataFrame,
    key: str,
) -> pl.DataFrame:
    """
    Left-join facts to a dimension on its key.
    
    Every fact row survives; unmatched rows carry null dimension fields.
    Duplicate dimension keys would fan out fact rows, so only the first
    row per key is kept.
    
    Args:
        facts: Sales fact rows
        dimension: Customer or product dimension
        key: Join key present in both frames
        
    Returns:
        Joined frame with the same number of rows as facts
    """
    unique_dimension = dimension.unique(subset=[key], keep="first", maintain_order=True)
    duplicates = dimension.height - unique_dimension.height
    if duplicates:
        logger.warning("Duplicate dimension keys ignored", key=key, rows=duplicates)
    
    joined = facts.join(unique_dimension, on=key, how="left")
    
    unmatched_keys = facts.filter(
        pl.col(key).is_not_null() & ~pl.col(key).is_in(unique_dimension[key].drop_nulls().to_list())
    ).height
    if unmatched_keys:
        logger.warning("Facts without dimension match kept", key=key, rows=unmatched_keys)
    
    return joined


def aggregate(
    df: pl.DataFrame,
    keys: Sequence[str],
    metrics: Sequence[Metric],
) -> pl.DataFrame:
    """
    Group by keys and reduce each group with the given metrics.
    
    Output is sorted by the keys so repeated runs are identical.
    """
    key_list: List[str] = list(keys)
    result = df.group_by(key_list).agg([metric.expression() for metric in metrics])
    return result.sort(key_list, nulls_last=True)
