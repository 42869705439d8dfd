"""
Data Transformation Module
"""
from .aggregators import Metric, AggregationKind, aggregate, drop_undated, join_dimension
from .classifiers import (
    RuleSet,
    ClassificationRule,
    AgeGroup,
    CustomerSegment,
    CostRange,
    ProductSegment,
    Trend,
    AverageComparison,
    AGE_GROUP_RULES,
    CUSTOMER_SEGMENT_RULES,
    COST_RANGE_RULES,
    PRODUCT_SEGMENT_RULES,
)
from .windows import running_total, lookback, partition_mean

__all__ = [
    "Metric",
    "AggregationKind",
    "aggregate",
    "drop_undated",
    "join_dimension",
    "RuleSet",
    "ClassificationRule",
    "AgeGroup",
    "CustomerSegment",
    "CostRange",
    "ProductSegment",
    "Trend",
    "AverageComparison",
    "AGE_GROUP_RULES",
    "CUSTOMER_SEGMENT_RULES",
    "COST_RANGE_RULES",
    "PRODUCT_SEGMENT_RULES",
    "running_total",
    "lookback",
    "partition_mean",
]
