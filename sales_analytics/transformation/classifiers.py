"""
Classification Rules

Ordered (predicate, label) rules evaluated first-match-wins with a mandatory
fallback, so every row gets exactly one label. Each rule set is defined once
and evaluated either on a single row (RuleSet.classify) or on a whole frame
as a polars when/then chain (RuleSet.expression).

Predicates are written against a row accessor: row["age"] is a plain value
when classifying a mapping and pl.col("age") when building an expression, so
the same lambda serves both. Combine conditions with & and |, never with
and/or or chained comparisons.

A rule whose input fields are null never matches, which is how SQL CASE
treats an unknown comparison.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Tuple

import polars as pl


class AgeGroup(str, Enum):
    """Customer age brackets"""
    UNDER_20 = "under 20"
    FROM_20_TO_29 = "20-29"
    FROM_30_TO_39 = "30-39"
    FROM_40_TO_49 = "40-49"
    FROM_50 = "50 and above"


class CustomerSegment(str, Enum):
    """Customer tier by relationship length and spend"""
    VIP = "VIP"
    REGULAR = "Regular"
    NEW = "New"


class CostRange(str, Enum):
    """Product unit cost bands"""
    BELOW_100 = "Below 100"
    FROM_100_TO_500 = "100-500"
    FROM_500_TO_1000 = "500-1000"
    ABOVE_1000 = "Above 1000"


class ProductSegment(str, Enum):
    """Product tier by revenue"""
    HIGH_PERFORMER = "High-Performer"
    MID_RANGE = "Mid-Range"
    LOW_PERFORMER = "Low-Performer"


class Trend(str, Enum):
    """Direction of change against the prior period"""
    INCREASING = "Increasing"
    DECREASING = "Decreasing"
    NO_CHANGE = "No Change"


class AverageComparison(str, Enum):
    """Position of a value against its average"""
    ABOVE = "Above Avg"
    BELOW = "Below Avg"
    AVERAGE = "Average"


class _ColumnAccessor:
    """Row stand-in that yields column expressions"""

    def __getitem__(self, name: str) -> pl.Expr:
        return pl.col(name)


@dataclass(frozen=True)
class ClassificationRule:
    """A labelled predicate over the named fields of a row"""
    label: Enum
    predicate: Callable[[Any], Any]
    fields: Tuple[str, ...]


@dataclass(frozen=True)
class RuleSet:
    """
    Ordered classification rules with a fallback label.

    Example:
        COST_RANGE_RULES.classify({"cost": 100})  # CostRange.FROM_100_TO_500
        df.with_columns(COST_RANGE_RULES.expression())
    """
    name: str
    rules: Tuple[ClassificationRule, ...]
    fallback: Enum

    def classify(self, row: Mapping[str, Any]) -> Enum:
        """Label a single row"""
        for rule in self.rules:
            if any(row.get(field) is None for field in rule.fields):
                continue
            if rule.predicate(row):
                return rule.label
        return self.fallback

    def expression(self, alias: Optional[str] = None) -> pl.Expr:
        """Polars expression labelling every row of a frame"""
        columns = _ColumnAccessor()
        chain = None
        for rule in self.rules:
            condition = rule.predicate(columns)
            label = pl.lit(rule.label.value)
            chain = pl.when(condition).then(label) if chain is None else chain.when(condition).then(label)

        fallback = pl.lit(self.fallback.value)
        expr = fallback if chain is None else chain.otherwise(fallback)
        return expr.alias(alias or self.name)

    @property
    def labels(self) -> Tuple[str, ...]:
        """Every label the rule set can produce, in evaluation order"""
        return tuple(rule.label.value for rule in self.rules) + (self.fallback.value,)


def age_group_rules(age_field: str = "age") -> RuleSet:
    return RuleSet(
        name="age_group",
        rules=(
            ClassificationRule(AgeGroup.UNDER_20, lambda r: r[age_field] < 20, (age_field,)),
            ClassificationRule(
                AgeGroup.FROM_20_TO_29,
                lambda r: (r[age_field] >= 20) & (r[age_field] <= 29),
                (age_field,),
            ),
            ClassificationRule(
                AgeGroup.FROM_30_TO_39,
                lambda r: (r[age_field] >= 30) & (r[age_field] <= 39),
                (age_field,),
            ),
            ClassificationRule(
                AgeGroup.FROM_40_TO_49,
                lambda r: (r[age_field] >= 40) & (r[age_field] <= 49),
                (age_field,),
            ),
        ),
        fallback=AgeGroup.FROM_50,
    )


def customer_segment_rules(
    lifespan_field: str = "lifespan",
    spend_field: str = "total_sales",
) -> RuleSet:
    return RuleSet(
        name="customer_segment",
        rules=(
            ClassificationRule(
                CustomerSegment.VIP,
                lambda r: (r[lifespan_field] >= 12) & (r[spend_field] > 5000),
                (lifespan_field, spend_field),
            ),
            ClassificationRule(
                CustomerSegment.REGULAR,
                lambda r: (r[lifespan_field] >= 12) & (r[spend_field] <= 5000),
                (lifespan_field, spend_field),
            ),
        ),
        fallback=CustomerSegment.NEW,
    )


def cost_range_rules(cost_field: str = "cost") -> RuleSet:
    # Each band includes its lower edge: 100, 500 and 1000 start a new band
    return RuleSet(
        name="cost_range",
        rules=(
            ClassificationRule(CostRange.BELOW_100, lambda r: r[cost_field] < 100, (cost_field,)),
            ClassificationRule(
                CostRange.FROM_100_TO_500,
                lambda r: (r[cost_field] >= 100) & (r[cost_field] < 500),
                (cost_field,),
            ),
            ClassificationRule(
                CostRange.FROM_500_TO_1000,
                lambda r: (r[cost_field] >= 500) & (r[cost_field] < 1000),
                (cost_field,),
            ),
        ),
        fallback=CostRange.ABOVE_1000,
    )


def product_segment_rules(sales_field: str = "total_sales") -> RuleSet:
    return RuleSet(
        name="product_segment",
        rules=(
            ClassificationRule(
                ProductSegment.HIGH_PERFORMER, lambda r: r[sales_field] > 50000, (sales_field,)
            ),
            ClassificationRule(
                ProductSegment.MID_RANGE, lambda r: r[sales_field] >= 10000, (sales_field,)
            ),
        ),
        fallback=ProductSegment.LOW_PERFORMER,
    )


def trend_rules(diff_field: str, name: str = "trend") -> RuleSet:
    return RuleSet(
        name=name,
        rules=(
            ClassificationRule(Trend.INCREASING, lambda r: r[diff_field] > 0, (diff_field,)),
            ClassificationRule(Trend.DECREASING, lambda r: r[diff_field] < 0, (diff_field,)),
        ),
        fallback=Trend.NO_CHANGE,
    )


def average_comparison_rules(diff_field: str, name: str = "avg_change") -> RuleSet:
    return RuleSet(
        name=name,
        rules=(
            ClassificationRule(AverageComparison.ABOVE, lambda r: r[diff_field] > 0, (diff_field,)),
            ClassificationRule(AverageComparison.BELOW, lambda r: r[diff_field] < 0, (diff_field,)),
        ),
        fallback=AverageComparison.AVERAGE,
    )


AGE_GROUP_RULES = age_group_rules()
CUSTOMER_SEGMENT_RULES = customer_segment_rules()
COST_RANGE_RULES = cost_range_rules()
PRODUCT_SEGMENT_RULES = product_segment_rules()


def classify_frame(df: pl.DataFrame, rule_set: RuleSet, alias: Optional[str] = None) -> pl.DataFrame:
    """Append the rule set's label column to a frame"""
    return df.with_columns(rule_set.expression(alias))
