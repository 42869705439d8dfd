"""
Derived Ratios

Average-based metrics with explicit zero guards. A zero denominator always
takes a documented fallback value; no ratio ever yields inf or NaN.
"""

from typing import Union

import polars as pl

ExprLike = Union[pl.Expr, float, int, None]


def _as_expr(value: ExprLike) -> pl.Expr:
    if isinstance(value, pl.Expr):
        return value
    return pl.lit(value)


def safe_divide(numerator: pl.Expr, denominator: pl.Expr, fallback: ExprLike) -> pl.Expr:
    """numerator / denominator, or fallback where the denominator is zero"""
    return (
        pl.when(denominator == 0)
        .then(_as_expr(fallback).cast(pl.Float64))
        .otherwise(numerator.cast(pl.Float64) / denominator)
    )


def per_month(total: pl.Expr, lifespan: pl.Expr) -> pl.Expr:
    """Average per month of activity; a single-month lifespan returns the total"""
    return safe_divide(total, lifespan, fallback=total)


def per_order(total: pl.Expr, orders: pl.Expr) -> pl.Expr:
    """Average per order; zero orders give zero"""
    return safe_divide(total, orders, fallback=0.0)


def unit_price(amount: pl.Expr, quantity: pl.Expr) -> pl.Expr:
    """
    Per-row selling price.

    Zero-quantity rows give null so a later mean skips them instead of the
    whole average being guarded.
    """
    return pl.when(quantity != 0).then(amount.cast(pl.Float64) / quantity).otherwise(None)


def share_of_total(value: pl.Expr, total: pl.Expr, precision: int = 2) -> pl.Expr:
    """Percentage of value in total, rounded; null when the total is zero"""
    return (
        pl.when(total == 0)
        .then(None)
        .otherwise(value.cast(pl.Float64) / total * 100)
        .round(precision)
    )


def format_percentage(share: pl.Expr, precision: int = 2) -> pl.Expr:
    """
    Render a percentage as text with a fixed number of decimals.

    12.5 -> '12.50%', 2.8 -> '2.80%', -0.5 -> '-0.50%'. The share is scaled
    to an integer and split into whole and zero-padded fractional digits, so
    trailing zeros are kept. Null shares stay null.
    """
    scale = 10 ** precision
    scaled = (share * scale).round(0).cast(pl.Int64)
    sign = pl.when(scaled < 0).then(pl.lit("-")).otherwise(pl.lit(""))
    magnitude = scaled.abs()
    whole = (magnitude // scale).cast(pl.Utf8)
    if precision == 0:
        return pl.concat_str([sign, whole, pl.lit("%")])
    fraction = (magnitude % scale).cast(pl.Utf8).str.zfill(precision)
    return pl.concat_str([sign, whole, pl.lit("."), fraction, pl.lit("%")])
