"""
Window Operations

Explicit sequence operations over a frame sorted within partitions:

- running_total: prefix sum restarted at each partition
- lookback: value from the previous row of the same partition
- partition_mean: mean over the whole partition, repeated on every row

Lookback is positional. When a partition skips a period, the previous
present row is used, not the calendar predecessor.
"""

from typing import List, Sequence, Union

import polars as pl

Columns = Union[str, Sequence[str]]


def _as_list(columns: Columns) -> List[str]:
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def _sorted(df: pl.DataFrame, partition_by: Columns, order_by: Columns) -> pl.DataFrame:
    return df.sort(_as_list(partition_by) + _as_list(order_by), nulls_last=True)


def running_total(
    df: pl.DataFrame,
    value: str,
    partition_by: Columns,
    order_by: Columns,
    alias: str = "running_total",
) -> pl.DataFrame:
    """
    Cumulative sum of value in order_by order, reset for every partition.
    
    Args:
        df: Input frame
        value: Column to accumulate
        partition_by: Column(s) whose change restarts the sum
        order_by: Column(s) ordering rows within a partition
        alias: Output column name
        
    Returns:
        Frame sorted by partition then order, with the running total column
    """
    return _sorted(df, partition_by, order_by).with_columns(
        pl.col(value).cum_sum().over(_as_list(partition_by)).alias(alias)
    )


def lookback(
    df: pl.DataFrame,
    value: str,
    partition_by: Columns,
    order_by: Columns,
    alias: str,
    offset: int = 1,
) -> pl.DataFrame:
    """Value from offset rows earlier in the same partition (null at the start)"""
    return _sorted(df, partition_by, order_by).with_columns(
        pl.col(value).shift(offset).over(_as_list(partition_by)).alias(alias)
    )


def partition_mean(
    df: pl.DataFrame,
    value: str,
    partition_by: Columns,
    alias: str,
) -> pl.DataFrame:
    """Mean of value over each partition, broadcast to its rows"""
    return df.with_columns(
        pl.col(value).mean().over(_as_list(partition_by)).alias(alias)
    )
