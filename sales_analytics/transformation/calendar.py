"""
Calendar Arithmetic

Month and year differences used for lifespan, recency and age. Month
differences count calendar-month boundaries crossed, so 2023-01-31 to
2023-02-01 is one month and any two dates in the same month are zero.
"""

from datetime import date, datetime
from typing import Union

import polars as pl

DateLike = Union[date, datetime]


def as_date(value: DateLike) -> date:
    """Normalize a datetime or date to a date"""
    if isinstance(value, datetime):
        return value.date()
    return value


def months_between(start: pl.Expr, end: pl.Expr) -> pl.Expr:
    """Calendar months from start to end (negative if end precedes start)"""
    years = end.dt.year().cast(pl.Int64) - start.dt.year().cast(pl.Int64)
    months = end.dt.month().cast(pl.Int64) - start.dt.month().cast(pl.Int64)
    return years * 12 + months


def months_until(start: pl.Expr, on: DateLike) -> pl.Expr:
    """Calendar months from start to a fixed evaluation date"""
    return months_between(start, pl.lit(as_date(on), dtype=pl.Date))


def age_in_years(birthdate: pl.Expr, on: DateLike) -> pl.Expr:
    """
    Whole years completed between birthdate and the evaluation date.

    A birthday not yet reached in the evaluation year does not count, unlike
    a count of calendar-year boundaries such as DATEDIFF(YEAR), which is one
    higher until the birthday. A 29 February birthday completes on 1 March
    in common years: born 2000-02-29 is 23 on 2024-02-28 and 24 on
    2024-02-29. Null birthdates give a null age.
    """
    on = as_date(on)
    years = pl.lit(on.year, dtype=pl.Int64) - birthdate.dt.year().cast(pl.Int64)
    month = birthdate.dt.month().cast(pl.Int64)
    day = birthdate.dt.day().cast(pl.Int64)
    before_birthday = (month > on.month) | ((month == on.month) & (day > on.day))
    return pl.when(before_birthday).then(years - 1).otherwise(years)
