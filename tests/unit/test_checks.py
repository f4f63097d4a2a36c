"""
Unit tests for rule checks.

Includes property-based testing with hypothesis for key and whitespace checks.
"""

from collections import Counter
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from silver_quality.core.checks import CHECK_REGISTRY, build_check
from silver_quality.core.models import RuleKind
from silver_quality.core.rules import parse_rule
from silver_quality.errors import BatchConsumedError, InvalidRuleDefinition
from silver_quality.sources import RowBatch


def evaluate(rule_def: dict, tables: dict[str, list[dict]]):
    """Build the check for a rule definition and run it over in-memory rows."""
    check = build_check(parse_rule(rule_def))
    batches = {name: RowBatch(name, list(rows)) for name, rows in tables.items()}
    return check.evaluate(batches)


def unique_rule(*keys, id_field=None):
    params = {"keyFields": list(keys)}
    if id_field:
        params["idField"] = id_field
    return {"id": "customers.unique", "table": "customers", "kind": "UNIQUE_KEY", "parameters": params}


def trim_rule(*fields):
    return {"id": "t.trimmed", "table": "t", "kind": "NO_TRAILING_WHITESPACE",
            "parameters": {"fields": list(fields)}}


def sales_rule(**extra):
    params = {"totalField": "sales", "quantityField": "qty", "priceField": "price", **extra}
    return {"id": "sales.consistency", "table": "sales", "kind": "ARITHMETIC_CONSISTENCY",
            "parameters": params}


def date_order_rule(**extra):
    params = {"startField": "start", "endField": "end", **extra}
    return {"id": "t.date_order", "table": "t", "kind": "DATE_ORDER", "parameters": params}


class TestUniqueKeyCheck:
    """Tests for UniqueKeyCheck"""

    def test_duplicate_group_reported_once(self):
        """Test a key repeated n times yields exactly one violation"""
        rows = [{"id": 1}, {"id": 1}, {"id": 2}]
        violations = evaluate(unique_rule("id"), {"customers": rows})

        assert len(violations) == 1
        assert violations[0].row_identifier == 1
        assert violations[0].details["count"] == 2
        assert violations[0].details["rows"] == [1, 2]
        assert violations[0].details["reason"] == "duplicate_key"

    def test_many_duplicates_single_entry(self):
        """Test five copies of a key still produce one entry"""
        rows = [{"id": 7}] * 5 + [{"id": 8}]
        violations = evaluate(unique_rule("id"), {"customers": rows})

        assert len(violations) == 1
        assert violations[0].details["count"] == 5

    def test_null_key_is_violation(self):
        """Test rows with a null key are reported individually"""
        rows = [{"id": 1}, {"id": None}, {"id": None}]
        violations = evaluate(unique_rule("id"), {"customers": rows})

        assert [v.details["reason"] for v in violations] == ["null_key", "null_key"]
        assert [v.row_identifier for v in violations] == [2, 3]

    def test_composite_key(self):
        """Test composite keys are grouped as tuples"""
        rows = [
            {"a": 1, "b": "x"},
            {"a": 1, "b": "y"},
            {"a": 1, "b": "x"},
        ]
        violations = evaluate(unique_rule("a", "b"), {"customers": rows})

        assert len(violations) == 1
        assert violations[0].row_identifier == (1, "x")

    def test_violations_in_first_appearance_order(self):
        """Test output follows the first row of each offending group"""
        rows = [{"id": 2}, {"id": None}, {"id": 1}, {"id": 2}, {"id": 1}]
        violations = evaluate(unique_rule("id"), {"customers": rows})

        assert [v.row_identifier for v in violations] == [2, 2, 1]
        assert [v.details["reason"] for v in violations] == ["duplicate_key", "null_key", "duplicate_key"]

    def test_null_key_uses_id_field(self):
        """Test null-key rows are identified by idField when configured"""
        rows = [{"id": None, "email": "a@example.com"}]
        violations = evaluate(unique_rule("id", id_field="email"), {"customers": rows})

        assert violations[0].row_identifier == "a@example.com"

    @given(st.lists(st.integers(min_value=0, max_value=20), max_size=60))
    def test_property_one_violation_per_duplicated_key(self, keys):
        """Property test: violations == number of keys seen more than once"""
        rows = [{"id": key} for key in keys]
        violations = evaluate(unique_rule("id"), {"customers": rows})

        expected = {key for key, n in Counter(keys).items() if n > 1}
        assert {v.row_identifier for v in violations} == expected
        assert len(violations) == len(expected)


class TestNotNullCheck:
    """Tests for NotNullCheck"""

    def test_reports_null_fields(self):
        """Test each row lists its null columns"""
        rule = {"id": "t.not_null", "table": "t", "kind": "NOT_NULL",
                "parameters": {"fields": ["a", "b"]}}
        rows = [{"a": 1, "b": 2}, {"a": None, "b": 2}, {"a": None, "b": None}]
        violations = evaluate(rule, {"t": rows})

        assert [v.row_identifier for v in violations] == [2, 3]
        assert violations[1].details["null_fields"] == ["a", "b"]

    def test_blank_as_null(self):
        """Test whitespace-only strings count as null when configured"""
        rule = {"id": "t.not_null", "table": "t", "kind": "NOT_NULL",
                "parameters": {"field": "a", "treatBlankAsNull": True}}
        violations = evaluate(rule, {"t": [{"a": "  "}, {"a": "x"}]})

        assert len(violations) == 1

    def test_blank_not_null_by_default(self):
        """Test whitespace-only strings pass by default"""
        rule = {"id": "t.not_null", "table": "t", "kind": "NOT_NULL", "parameters": {"field": "a"}}
        assert evaluate(rule, {"t": [{"a": "  "}]}) == []


class TestWhitespaceCheck:
    """Tests for WhitespaceCheck"""

    @pytest.mark.parametrize("value", [" abc", "abc ", " abc ", "abc\t"])
    def test_untrimmed_values_are_violations(self, value):
        """Test leading or trailing whitespace is reported"""
        violations = evaluate(trim_rule("name"), {"t": [{"name": value}]})

        assert len(violations) == 1
        assert violations[0].details["values"] == {"name": value}

    @pytest.mark.parametrize("value", ["abc", "a b c", "", None, 42])
    def test_trimmed_values_pass(self, value):
        """Test trimmed strings, internal spaces, nulls and non-strings pass"""
        assert evaluate(trim_rule("name"), {"t": [{"name": value}]}) == []

    def test_one_violation_per_row(self):
        """Test several untrimmed columns in a row make one violation"""
        rows = [{"cat": " Bikes", "subcat": "Road ", "maintenance": "Yes"}]
        violations = evaluate(trim_rule("cat", "subcat", "maintenance"), {"t": rows})

        assert len(violations) == 1
        assert set(violations[0].details["values"]) == {"cat", "subcat"}

    @given(st.text(max_size=20))
    def test_property_violation_iff_untrimmed(self, value):
        """Property test: a string is a violation exactly when strip() changes it"""
        violations = evaluate(trim_rule("name"), {"t": [{"name": value}]})
        assert (len(violations) == 1) == (value != value.strip())


class TestAllowedValuesCheck:
    """Tests for AllowedValuesCheck"""

    def test_descriptive_lists_distinct_values(self):
        """Test that without values every distinct value is listed with its count"""
        rule = {"id": "t.values", "table": "t", "kind": "ALLOWED_VALUES", "parameters": {"field": "gndr"}}
        rows = [{"gndr": "Male"}, {"gndr": "Female"}, {"gndr": "Male"}, {"gndr": None}]
        check = build_check(parse_rule(rule))
        violations = check.evaluate({"t": RowBatch("t", rows)})

        assert check.descriptive is True
        assert [(v.row_identifier, v.details["count"]) for v in violations] == [
            ("Male", 2), ("Female", 1), (None, 1)
        ]
        assert all(v.details["descriptive"] for v in violations)

    def test_values_outside_allow_list(self):
        """Test only values outside the allow-list are reported"""
        rule = {"id": "t.values", "table": "t", "kind": "ALLOWED_VALUES",
                "parameters": {"field": "gndr", "values": ["Male", "Female", "n/a"]}}
        rows = [{"gndr": "Male"}, {"gndr": "F"}, {"gndr": "F"}, {"gndr": "n/a"}]
        violations = evaluate(rule, {"t": rows})

        assert len(violations) == 1
        assert violations[0].row_identifier == "F"
        assert violations[0].details["count"] == 2

    def test_normalize_before_lookup(self):
        """Test normalize transforms run before the allow-list lookup"""
        rule = {"id": "t.values", "table": "t", "kind": "ALLOWED_VALUES",
                "parameters": {"field": "gen", "values": ["F", "M"], "normalize": ["trim", "upper"]}}
        rows = [{"gen": " f "}, {"gen": "m"}, {"gen": "x"}]
        violations = evaluate(rule, {"t": rows})

        assert [v.row_identifier for v in violations] == ["X"]

    def test_values_must_be_list(self):
        """Test a scalar values parameter is rejected"""
        rule = {"id": "t.values", "table": "t", "kind": "ALLOWED_VALUES",
                "parameters": {"field": "gen", "values": "Male"}}
        with pytest.raises(InvalidRuleDefinition):
            build_check(parse_rule(rule))


class TestDateOrderCheck:
    """Tests for DateOrderCheck"""

    def test_end_before_start_is_violation(self):
        """Test an end date before the start date is reported"""
        rows = [{"start": date(2020, 1, 1), "end": date(2019, 12, 31)}]
        violations = evaluate(date_order_rule(), {"t": rows})

        assert len(violations) == 1
        assert violations[0].details["reason"] == "end_before_start"

    def test_null_start_is_violation(self):
        """Test a missing start date is reported whatever the end"""
        rows = [{"start": None, "end": date(2021, 1, 1)}, {"start": None, "end": None}]
        violations = evaluate(date_order_rule(), {"t": rows})

        assert [v.details["reason"] for v in violations] == ["missing_start", "missing_start"]

    def test_null_end_is_not_violation(self):
        """Test an open-ended validity passes"""
        rows = [{"start": date(2020, 1, 1), "end": None}]
        assert evaluate(date_order_rule(), {"t": rows}) == []

    def test_same_day_passes(self):
        """Test start equal to end passes"""
        rows = [{"start": date(2020, 1, 1), "end": date(2020, 1, 1)}]
        assert evaluate(date_order_rule(), {"t": rows}) == []

    def test_integer_dates_and_multiple_ends(self):
        """Test YYYYMMDD integers and several end columns"""
        rule = {"id": "sales.date_order", "table": "sales", "kind": "DATE_ORDER",
                "parameters": {"startField": "order_dt", "endFields": ["ship_dt", "due_dt"],
                               "idField": "ord_num"}}
        rows = [
            {"ord_num": "SO1", "order_dt": 20101229, "ship_dt": 20110105, "due_dt": 20110110},
            {"ord_num": "SO2", "order_dt": 20110110, "ship_dt": 20110105, "due_dt": 20110120},
        ]
        violations = evaluate(rule, {"sales": rows})

        assert len(violations) == 1
        assert violations[0].row_identifier == "SO2"
        assert violations[0].details["ends"] == {"ship_dt": 20110105}

    def test_datetime_against_date(self):
        """Test a datetime end is compared on its date"""
        rows = [{"start": date(2020, 1, 2), "end": datetime(2020, 1, 1, 23, 59)}]
        assert len(evaluate(date_order_rule(), {"t": rows})) == 1

    def test_unparseable_date(self):
        """Test garbage dates are reported instead of raising"""
        rows = [{"start": "not a date", "end": None}]
        violations = evaluate(date_order_rule(), {"t": rows})

        assert violations[0].details["reason"] == "unparseable"


class TestArithmeticCheck:
    """Tests for ArithmeticCheck"""

    def test_consistent_row_passes(self):
        """Test sales == qty * price passes"""
        assert evaluate(sales_rule(), {"sales": [{"sales": 20, "qty": 4, "price": 5}]}) == []

    def test_zero_sales_fails(self):
        """Test zero sales is reported as non-positive"""
        violations = evaluate(sales_rule(), {"sales": [{"sales": 0, "qty": 4, "price": 5}]})

        assert len(violations) == 1
        assert "non_positive:sales" in violations[0].details["reasons"]

    def test_mismatch_fails(self):
        """Test sales != qty * price is reported"""
        violations = evaluate(sales_rule(), {"sales": [{"sales": 21, "qty": 4, "price": 5}]})

        assert violations[0].details["reasons"] == ["mismatch"]

    def test_null_fails(self):
        """Test a null operand is reported"""
        violations = evaluate(sales_rule(), {"sales": [{"sales": None, "qty": 4, "price": 5}]})

        assert violations[0].details["reasons"] == ["null:sales"]

    def test_negative_price_fails(self):
        """Test negative operands are not allowed"""
        violations = evaluate(sales_rule(), {"sales": [{"sales": -20, "qty": 4, "price": -5}]})

        reasons = violations[0].details["reasons"]
        assert "non_positive:sales" in reasons
        assert "non_positive:price" in reasons

    def test_decimal_arithmetic_is_exact(self):
        """Test float inputs do not produce binary rounding mismatches"""
        rows = [{"sales": 0.3, "qty": 3, "price": 0.1}, {"sales": Decimal("7.50"), "qty": 3, "price": "2.5"}]
        assert evaluate(sales_rule(), {"sales": rows}) == []

    def test_tolerance(self):
        """Test differences within tolerance pass"""
        rows = [{"sales": 20.01, "qty": 4, "price": 5}]
        assert evaluate(sales_rule(tolerance=0.05), {"sales": rows}) == []

    def test_non_numeric(self):
        """Test non-numeric operands are reported"""
        violations = evaluate(sales_rule(), {"sales": [{"sales": "abc", "qty": 4, "price": 5}]})

        assert violations[0].details["reasons"] == ["non_numeric:sales"]

    def test_decimal_nan_operand(self):
        """Test a NaN numeric value is reported instead of compared"""
        violations = evaluate(sales_rule(), {"sales": [{"sales": Decimal("NaN"), "qty": 4, "price": 5}]})

        assert violations[0].details["reasons"] == ["non_numeric:sales"]

    def test_default_field_names(self):
        """Test the sls_* columns are used by default"""
        rule = {"id": "sales.consistency", "table": "sales", "kind": "ARITHMETIC_CONSISTENCY"}
        rows = [{"sls_sales": 10, "sls_quantity": 2, "sls_price": 4}]
        violations = evaluate(rule, {"sales": rows})

        assert violations[0].details["reasons"] == ["mismatch"]


class TestCrossReferenceCheck:
    """Tests for CrossReferenceCheck"""

    def reference_rule(self, **extra):
        params = {"field": "cid", "referenceField": "cst_key", **extra}
        return {"id": "erp.cid.references", "targetTables": ["erp", "crm"],
                "kind": "CROSS_TABLE_REFERENCE", "parameters": params}

    def test_missing_reference(self):
        """Test keys absent from the referenced table are reported"""
        tables = {
            "erp": [{"cid": "AW1"}, {"cid": "AW9"}],
            "crm": [{"cst_key": "AW1"}, {"cst_key": "AW2"}],
        }
        violations = evaluate(self.reference_rule(), tables)

        assert len(violations) == 1
        assert violations[0].row_identifier == 2
        assert violations[0].details["value"] == "AW9"
        assert violations[0].details["reason"] == "missing_reference"

    def test_strip_prefix_transform(self):
        """Test the NAS prefix is stripped before lookup"""
        tables = {
            "erp": [{"cid": "NASAW1"}, {"cid": "AW2"}, {"cid": "NASAW3"}],
            "crm": [{"cst_key": "AW1"}, {"cst_key": "AW2"}],
        }
        rule = self.reference_rule(transform=[{"type": "strip_prefix", "prefix": "NAS"}])
        violations = evaluate(rule, tables)

        assert len(violations) == 1
        assert violations[0].details["normalized"] == "AW3"

    def test_remove_transform(self):
        """Test dashes are removed before lookup"""
        tables = {
            "erp": [{"cid": "AW-00011000"}],
            "crm": [{"cst_key": "AW00011000"}],
        }
        rule = self.reference_rule(transform=[{"type": "remove", "char": "-"}])
        assert evaluate(rule, tables) == []

    def test_null_foreign_key(self):
        """Test null keys are violations unless allowNull"""
        tables = {"erp": [{"cid": None}], "crm": [{"cst_key": "AW1"}]}

        assert evaluate(self.reference_rule(), tables)[0].details["reason"] == "null_key"
        assert evaluate(self.reference_rule(allowNull=True), tables) == []

    def test_compare_as_string(self):
        """Test integer and string keys match with compareAsString"""
        tables = {"erp": [{"cid": 11000}], "crm": [{"cst_key": "11000"}]}

        assert len(evaluate(self.reference_rule(), tables)) == 1
        assert evaluate(self.reference_rule(compareAsString=True), tables) == []

    def test_same_table_reference(self):
        """Test a table referencing itself materializes rows once"""
        rule = {"id": "emp.manager", "table": "emp", "kind": "CROSS_TABLE_REFERENCE",
                "parameters": {"field": "manager_id", "referenceTable": "emp",
                               "referenceField": "emp_id", "allowNull": True}}
        rows = [
            {"emp_id": 1, "manager_id": None},
            {"emp_id": 2, "manager_id": 1},
            {"emp_id": 3, "manager_id": 9},
        ]
        violations = evaluate(rule, {"emp": rows})

        assert [v.row_identifier for v in violations] == [3]

    def test_reference_table_must_be_target(self):
        """Test the referenced table must be listed in targetTables"""
        rule = {"id": "erp.cid.references", "table": "erp", "kind": "CROSS_TABLE_REFERENCE",
                "parameters": {"field": "cid", "referenceTable": "crm", "referenceField": "cst_key"}}
        with pytest.raises(InvalidRuleDefinition, match="targetTables"):
            build_check(parse_rule(rule))

    def test_unknown_transform(self):
        """Test unknown transform types are rejected"""
        with pytest.raises(InvalidRuleDefinition, match="unknown transform"):
            build_check(parse_rule(self.reference_rule(transform=["reverse"])))


class TestRangeCheck:
    """Tests for RangeCheck"""

    def cost_rule(self, **params):
        return {"id": "prd.cost.range", "table": "prd", "kind": "RANGE",
                "parameters": {"field": "cost", **params}}

    def test_numeric_bounds(self):
        """Test below-min values and nulls are reported"""
        rows = [{"cost": 0}, {"cost": 12.5}, {"cost": -1}, {"cost": None}]
        violations = evaluate(self.cost_rule(min=0), {"prd": rows})

        assert [(v.row_identifier, v.details["reason"]) for v in violations] == [
            (3, "below_min"), (4, "null")
        ]

    def test_upper_bound(self):
        """Test above-max values are reported"""
        violations = evaluate(self.cost_rule(min=0, max=100), {"prd": [{"cost": Decimal("100.01")}]})
        assert violations[0].details["reason"] == "above_max"

    def test_not_comparable(self):
        """Test text in a numeric range is reported"""
        violations = evaluate(self.cost_rule(min=0), {"prd": [{"cost": "cheap"}]})
        assert violations[0].details["reason"] == "not_comparable"

    def test_float_nan_is_not_comparable(self):
        """Test float NaN and infinity are reported rather than treated as in range"""
        rows = [{"cost": float("nan")}, {"cost": float("inf")}, {"cost": 5.0}]
        violations = evaluate(self.cost_rule(min=0, max=100), {"prd": rows})

        assert [(v.row_identifier, v.details["reason"]) for v in violations] == [
            (1, "not_comparable"), (2, "not_comparable")
        ]

    def test_decimal_nan_keeps_other_violations(self):
        """Test a numeric NaN does not hide real out-of-range rows"""
        rows = [{"cost": Decimal("NaN")}, {"cost": Decimal("-1")}]
        violations = evaluate(self.cost_rule(min=0), {"prd": rows})

        assert [(v.row_identifier, v.details["reason"]) for v in violations] == [
            (1, "not_comparable"), (2, "below_min")
        ]

    def test_non_finite_bound(self):
        """Test NaN bounds are rejected"""
        with pytest.raises(InvalidRuleDefinition):
            build_check(parse_rule(self.cost_rule(min=float("nan"))))

    def test_date_bounds_with_today(self):
        """Test ISO date bounds and the today token"""
        rule = {"id": "cust.bdate.range", "table": "cust", "kind": "RANGE",
                "parameters": {"field": "bdate", "min": "1924-01-01", "max": "today"}}
        rows = [
            {"bdate": date(1971, 10, 6)},
            {"bdate": date(1916, 2, 10)},
            {"bdate": date.today() + timedelta(days=30)},
        ]
        violations = evaluate(rule, {"cust": rows})

        assert [v.details["reason"] for v in violations] == ["below_min", "above_max"]

    def test_min_greater_than_max(self):
        """Test inverted bounds are rejected"""
        with pytest.raises(InvalidRuleDefinition):
            build_check(parse_rule(self.cost_rule(min=10, max=1)))

    def test_mixed_bound_types(self):
        """Test a number and a date bound cannot be combined"""
        with pytest.raises(InvalidRuleDefinition):
            build_check(parse_rule(self.cost_rule(min=0, max="2020-01-01")))

    def test_requires_a_bound(self):
        """Test at least one bound is required"""
        with pytest.raises(InvalidRuleDefinition):
            build_check(parse_rule(self.cost_rule()))


class TestIntegerDateCheck:
    """Tests for IntegerDateCheck"""

    def rule(self, **params):
        return {"id": "sales.ship_dt", "table": "sales", "kind": "INTEGER_DATE",
                "parameters": {"field": "ship_dt", "min": 19000101, "max": 20500101, **params}}

    @pytest.mark.parametrize("value,reason", [
        (None, "null"),
        (0, "non_positive"),
        (-20101229, "non_positive"),
        (2010122, "bad_length"),
        (201012290, "bad_length"),
        (20101332, "invalid_date"),
        (18991231, "below_min"),
        (20500102, "above_max"),
        ("abc", "non_numeric"),
    ])
    def test_invalid_values(self, value, reason):
        """Test each kind of bad integer date"""
        violations = evaluate(self.rule(), {"sales": [{"ship_dt": value}]})

        assert len(violations) == 1
        assert violations[0].details["reason"] == reason

    @pytest.mark.parametrize("value", [20101229, "20110105", 20110110.0, Decimal("20500101")])
    def test_valid_values(self, value):
        """Test real dates in range pass whatever their numeric type"""
        assert evaluate(self.rule(), {"sales": [{"ship_dt": value}]}) == []

    def test_allow_null(self):
        """Test nulls pass with allowNull"""
        assert evaluate(self.rule(allowNull=True), {"sales": [{"ship_dt": None}]}) == []

    def test_bound_must_be_date(self):
        """Test bounds must themselves be YYYYMMDD dates"""
        with pytest.raises(InvalidRuleDefinition):
            build_check(parse_rule(self.rule(min=19001301)))


EMPTY_INPUT_RULES = [
    unique_rule("id"),
    {"id": "t.not_null", "table": "customers", "kind": "NOT_NULL", "parameters": {"field": "id"}},
    {"id": "t.trimmed", "table": "customers", "kind": "NO_TRAILING_WHITESPACE", "parameters": {"field": "id"}},
    {"id": "t.values", "table": "customers", "kind": "ALLOWED_VALUES", "parameters": {"field": "id"}},
    {"id": "t.values2", "table": "customers", "kind": "ALLOWED_VALUES",
     "parameters": {"field": "id", "values": [1]}},
    {"id": "t.order", "table": "customers", "kind": "DATE_ORDER",
     "parameters": {"startField": "a", "endField": "b"}},
    {"id": "t.ref", "targetTables": ["customers", "other"], "kind": "CROSS_TABLE_REFERENCE",
     "parameters": {"field": "id", "referenceField": "id"}},
    {"id": "t.sales", "table": "customers", "kind": "ARITHMETIC_CONSISTENCY"},
    {"id": "t.range", "table": "customers", "kind": "RANGE", "parameters": {"field": "id", "min": 0}},
    {"id": "t.intdate", "table": "customers", "kind": "INTEGER_DATE", "parameters": {"field": "id"}},
]


class TestEmptyInput:
    """Every kind passes vacuously on empty input"""

    def test_every_kind_covered(self):
        """Test the empty-input cases cover the whole kind catalog"""
        kinds = {parse_rule(rule).kind for rule in EMPTY_INPUT_RULES}
        assert kinds == set(RuleKind) == set(CHECK_REGISTRY)

    @pytest.mark.parametrize("rule_def", EMPTY_INPUT_RULES, ids=lambda r: r["id"])
    def test_empty_batch_has_no_violations(self, rule_def):
        """Test evaluating empty row batches yields nothing"""
        assert evaluate(rule_def, {"customers": [], "other": []}) == []


class TestRowBatch:
    """Tests for single-use row batches"""

    def test_second_iteration_raises(self):
        """Test a batch cannot be consumed twice"""
        batch = RowBatch("t", [{"a": 1}])
        assert list(batch) == [{"a": 1}]
        assert batch.consumed is True

        with pytest.raises(BatchConsumedError):
            list(batch)

    def test_kind_mismatch_rejected(self):
        """Test a check refuses a rule of another kind"""
        from silver_quality.core.checks import RangeCheck

        with pytest.raises(InvalidRuleDefinition):
            RangeCheck(parse_rule(unique_rule("id")))
