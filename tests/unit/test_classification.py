"""
Unit Tests - Classification Rules
"""
import pytest
import polars as pl

from sales_analytics.transformation.classifiers import (
    AGE_GROUP_RULES,
    COST_RANGE_RULES,
    CUSTOMER_SEGMENT_RULES,
    PRODUCT_SEGMENT_RULES,
    AgeGroup,
    AverageComparison,
    CostRange,
    CustomerSegment,
    ProductSegment,
    Trend,
    average_comparison_rules,
    classify_frame,
    trend_rules,
)


class TestAgeGroup:
    """Tests for age brackets"""

    @pytest.mark.parametrize("age,expected", [
        (0, AgeGroup.UNDER_20),
        (19, AgeGroup.UNDER_20),
        (20, AgeGroup.FROM_20_TO_29),
        (29, AgeGroup.FROM_20_TO_29),
        (30, AgeGroup.FROM_30_TO_39),
        (39, AgeGroup.FROM_30_TO_39),
        (40, AgeGroup.FROM_40_TO_49),
        (49, AgeGroup.FROM_40_TO_49),
        (50, AgeGroup.FROM_50),
        (87, AgeGroup.FROM_50),
    ])
    def test_brackets(self, age, expected):
        """Test bracket edges"""
        assert AGE_GROUP_RULES.classify({"age": age}) == expected

    def test_unknown_age_falls_back(self):
        """Test null age takes the last bracket"""
        assert AGE_GROUP_RULES.classify({"age": None}) == AgeGroup.FROM_50


class TestCustomerSegment:
    """Tests for customer tiers"""

    @pytest.mark.parametrize("lifespan,spend,expected", [
        (12, 5001, CustomerSegment.VIP),
        (12, 9999, CustomerSegment.VIP),
        (30, 1_000_000, CustomerSegment.VIP),
        (12, 5000, CustomerSegment.REGULAR),
        (24, 0, CustomerSegment.REGULAR),
        (11, 999_999, CustomerSegment.NEW),
        (0, 10, CustomerSegment.NEW),
    ])
    def test_segments(self, lifespan, spend, expected):
        """Test lifespan and spend thresholds"""
        row = {"lifespan": lifespan, "total_sales": spend}
        assert CUSTOMER_SEGMENT_RULES.classify(row) == expected


class TestCostRange:
    """Tests for cost bands"""

    @pytest.mark.parametrize("cost,expected", [
        (0.0, CostRange.BELOW_100),
        (99.99, CostRange.BELOW_100),
        (100.0, CostRange.FROM_100_TO_500),
        (499.99, CostRange.FROM_100_TO_500),
        (500.0, CostRange.FROM_500_TO_1000),
        (999.0, CostRange.FROM_500_TO_1000),
        (1000.0, CostRange.ABOVE_1000),
        (2171.29, CostRange.ABOVE_1000),
    ])
    def test_bands(self, cost, expected):
        """Test band edges belong to the upper band"""
        assert COST_RANGE_RULES.classify({"cost": cost}) == expected

    def test_every_value_gets_a_label(self):
        """Test classification is total"""
        for cost in [-5.0, 0.0, 50.0, 100.0, 750.0, 1000.0, 1e9, None]:
            assert COST_RANGE_RULES.classify({"cost": cost}).value in COST_RANGE_RULES.labels


class TestProductSegment:
    """Tests for product tiers"""

    @pytest.mark.parametrize("sales,expected", [
        (50001, ProductSegment.HIGH_PERFORMER),
        (50000, ProductSegment.MID_RANGE),
        (10000, ProductSegment.MID_RANGE),
        (9999.99, ProductSegment.LOW_PERFORMER),
        (0, ProductSegment.LOW_PERFORMER),
    ])
    def test_segments(self, sales, expected):
        """Test revenue thresholds"""
        assert PRODUCT_SEGMENT_RULES.classify({"total_sales": sales}) == expected


class TestChangeRules:
    """Tests for trend and average comparison labels"""

    def test_trend(self):
        """Test sign of the difference"""
        rules = trend_rules("diff")

        assert rules.classify({"diff": 10.0}) == Trend.INCREASING
        assert rules.classify({"diff": -0.5}) == Trend.DECREASING
        assert rules.classify({"diff": 0.0}) == Trend.NO_CHANGE
        assert rules.classify({"diff": None}) == Trend.NO_CHANGE

    def test_average_comparison(self):
        """Test position against the average"""
        rules = average_comparison_rules("diff")

        assert rules.classify({"diff": 1.0}) == AverageComparison.ABOVE
        assert rules.classify({"diff": -1.0}) == AverageComparison.BELOW
        assert rules.classify({"diff": 0.0}) == AverageComparison.AVERAGE


class TestRuleSetExpression:
    """Tests for frame-level evaluation"""

    def test_expression_matches_row_classification(self):
        """Test frame labels equal row-by-row labels"""
        costs = [None, 0.0, 99.5, 100.0, 499.0, 500.0, 999.99, 1000.0, 5000.0]
        df = pl.DataFrame({"cost": costs}, schema={"cost": pl.Float64})

        result = classify_frame(df, COST_RANGE_RULES, alias="cost_range")

        expected = [COST_RANGE_RULES.classify({"cost": c}).value for c in costs]
        assert result["cost_range"].to_list() == expected

    def test_expression_with_two_fields(self):
        """Test multi-field rules in a frame"""
        df = pl.DataFrame({
            "lifespan": [12, 12, 11, None],
            "total_sales": [5001.0, 5000.0, 999999.0, 100000.0],
        })

        result = df.with_columns(CUSTOMER_SEGMENT_RULES.expression())

        assert result["customer_segment"].to_list() == ["VIP", "Regular", "New", "New"]

    def test_labels_in_evaluation_order(self):
        """Test labels end with the fallback"""
        assert PRODUCT_SEGMENT_RULES.labels == ("High-Performer", "Mid-Range", "Low-Performer")
