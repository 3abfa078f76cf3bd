"""
Tests for odata_client.query.grammar.
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

import pytest

from odata_client.core.exceptions import MissingEntitySet
from odata_client.query.builder import Builder
from odata_client.query.clauses import raw
from odata_client.query.grammar import Grammar, GrammarV2, IGrammar, escape_odata_literal, _join_csv


class Color(Enum):
    RED = "Red"


class TestHelperFunctions:
    """Tests for helper functions."""

    def test_escape_odata_literal(self):
        assert escape_odata_literal("simple") == "simple"
        assert escape_odata_literal("O'Brien") == "O''Brien"
        assert escape_odata_literal("test''double") == "test''''double"

    def test_join_csv(self):
        assert _join_csv(["a", "b", "c"]) == "a,b,c"
        assert _join_csv(["  a  ", "b", "  c"]) == "a,b,c"
        assert _join_csv(["a", "", "c"]) == "a,c"
        assert _join_csv([]) == ""


class TestPrepareValue:
    """Tests for literal rendering."""

    @pytest.fixture
    def grammar(self):
        return Grammar()

    def test_scalars(self, grammar):
        assert grammar.prepare_value(None) == "null"
        assert grammar.prepare_value(True) == "true"
        assert grammar.prepare_value(False) == "false"
        assert grammar.prepare_value(42) == "42"
        assert grammar.prepare_value(1.5) == "1.5"
        assert grammar.prepare_value(Decimal("1.50")) == "1.50"

    def test_non_finite_numbers(self, grammar):
        assert grammar.prepare_value(float("nan")) == "NaN"
        assert grammar.prepare_value(float("inf")) == "INF"
        assert grammar.prepare_value(float("-inf")) == "-INF"
        assert grammar.prepare_value(Decimal("NaN")) == "NaN"
        assert grammar.prepare_value(Decimal("-Infinity")) == "-INF"

    def test_strings_are_quoted_and_escaped(self, grammar):
        assert grammar.prepare_value("Russell") == "'Russell'"
        assert grammar.prepare_value("O'Brien") == "'O''Brien'"
        assert grammar.prepare_value("42") == "'42'"

    def test_typed_literals_pass_through(self, grammar):
        value = "guid'0b2c1d0e-3f4a-4b5c-8d9e-0f1a2b3c4d5e'"
        assert grammar.prepare_value(value) == value
        assert grammar.prepare_value("datetime'2020-01-02T03:04:05'") == "datetime'2020-01-02T03:04:05'"

    def test_dates_and_times(self, grammar):
        assert grammar.prepare_value(datetime(2020, 1, 2, 3, 4, 5)) == "2020-01-02T03:04:05Z"
        aware = datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2)))
        assert grammar.prepare_value(aware) == "2020-01-02T03:04:05+02:00"
        assert grammar.prepare_value(date(2020, 1, 2)) == "2020-01-02"

    def test_uuid_enum_sequence_expression(self, grammar):
        u = uuid.UUID("0b2c1d0e-3f4a-4b5c-8d9e-0f1a2b3c4d5e")
        assert grammar.prepare_value(u) == "0b2c1d0e-3f4a-4b5c-8d9e-0f1a2b3c4d5e"
        assert grammar.prepare_value(Color.RED) == "'Red'"
        assert grammar.prepare_value([1, "a"]) == "(1,'a')"
        assert grammar.prepare_value(raw("Cost mul 2")) == "Cost mul 2"


class TestPath:
    """Tests for the resource path."""

    def test_entity_set_only(self, builder):
        assert builder.to_request() == "People"

    def test_missing_entity_set_raises(self):
        with pytest.raises(MissingEntitySet):
            Builder().where("a", 1).to_request()

    def test_string_key_is_quoted(self, builder):
        assert builder.where_key("russellwhyte").to_request() == "People('russellwhyte')"

    def test_numeric_key_is_bare(self):
        assert Builder().from_("Orders").where_key(5).to_request() == "Orders(5)"

    def test_guid_key_is_bare(self):
        key = "0b2c1d0e-3f4a-4b5c-8d9e-0f1a2b3c4d5e"
        assert Builder().from_("Items").where_key(key).to_request() == f"Items({key})"

    def test_composite_key(self):
        q = Builder().from_("Order_Details").where_key({"OrderID": 1, "ProductID": "x"})
        assert q.to_request() == "Order_Details(OrderID=1,ProductID='x')"

    def test_reference(self, builder):
        q = builder.where_key("russellwhyte").reference("Friends")
        assert q.to_request() == "People('russellwhyte')/Friends/$ref"

    def test_reference_with_id(self, builder):
        q = builder.where_key("russellwhyte").reference("Friends", "scottketchum")
        assert q.to_request() == "People('russellwhyte')/Friends('scottketchum')/$ref"

    def test_count_suffix(self, builder):
        builder.where("Age", ">", 30).count_only = True
        assert builder.to_request() == "People/$count?$filter=Age gt 30"


class TestOptions:
    """Tests for query options."""

    def test_no_wheres_omits_filter(self, builder):
        q = builder.select("FirstName").order("FirstName").take(3)
        assert "$filter" not in q.to_request()

    def test_select(self, builder):
        assert builder.select("a", "b").to_request() == "People?$select=a,b"

    def test_basic_operators(self, builder):
        q = (
            builder.where("a", "=", 1)
            .where("b", "!=", 2)
            .where("c", "<>", 3)
            .where("d", ">", 4)
            .where("e", ">=", 5)
            .where("f", "<", 6)
            .where("g", "<=", 7)
        )
        assert q.to_request() == (
            "People?$filter=a eq 1 and b ne 2 and c ne 3 and d gt 4 "
            "and e ge 5 and f lt 6 and g le 7"
        )

    def test_native_operator_names(self, builder):
        q = builder.where("Age", "ge", 18).where("Color", "has", raw("Colors'Red'"))
        assert q.to_request() == "People?$filter=Age ge 18 and Color has Colors'Red'"

    def test_in_operator(self, builder):
        q = builder.where_in("Age", [30, 34])
        assert q.to_request() == "People?$filter=Age in (30,34)"

    def test_function(self, builder):
        q = builder.where("FirstName", "contains", "uss").or_where("LastName", "startswith", "Wh")
        assert q.to_request() == "People?$filter=contains(FirstName,'uss') or startswith(LastName,'Wh')"

    def test_null_tests(self, builder):
        q = builder.where_null("MiddleName").or_where_not_null("Emails")
        assert q.to_request() == "People?$filter=MiddleName eq null or Emails ne null"

    def test_nested_group(self, builder):
        q = builder.where("LastName", "Whyte").or_where(
            lambda g: g.where("Age", ">", 30).where("Age", "<", 40)
        )
        assert q.to_request() == "People?$filter=LastName eq 'Whyte' or (Age gt 30 and Age lt 40)"

    def test_doubly_nested_group(self, builder):
        q = builder.where(
            lambda g: g.where("a", 1).or_where(lambda h: h.where("b", 2).where("c", 3))
        )
        assert q.to_request() == "People?$filter=(a eq 1 or (b eq 2 and c eq 3))"

    def test_sub_query(self, builder):
        q = builder.where("UserName", "in", lambda s: s.from_("Friends").select("UserName"))
        assert q.to_request() == "People?$filter=UserName in (Friends?$select=UserName)"

    def test_expand(self, builder):
        assert builder.expand("Friends", "Trips").to_request() == "People?$expand=Friends,Trips"

    def test_expand_with_nested_options(self, builder):
        q = builder.expand(
            "Friends",
            ("Trips", lambda t: t.select("Name").where("Budget", ">", 1000).take(2)),
        )
        assert q.to_request() == (
            "People?$expand=Friends,Trips($select=Name;$filter=Budget gt 1000;$top=2)"
        )

    def test_expand_mapping_without_options(self, builder):
        q = builder.expand({"Trips": lambda t: None})
        assert q.to_request() == "People?$expand=Trips"

    def test_orders(self, builder):
        assert builder.order("a").to_request() == "People?$orderby=a asc"
        assert builder.order("a", "desc").to_request() == "People?$orderby=a desc"
        q = builder.order([["a", "desc"], ["b", "asc"]])
        assert q.to_request() == "People?$orderby=a desc,b asc"

    def test_order_by_sql(self, builder):
        q = builder.order("a").order_by_sql("LastName desc, Age")
        assert q.to_request() == "People?$orderby=LastName desc, Age"

    def test_paging_independent_of_call_order(self):
        a = Builder().from_("People").skip(10).take(5).to_request()
        b = Builder().from_("People").take(5).skip(10).to_request()
        assert a == b == "People?$skip=10&$top=5"

    def test_total_count(self, builder):
        builder.take(5).total_count = True
        assert builder.to_request() == "People?$top=5&$count=true"

    def test_option_order_is_fixed(self):
        q = (
            Builder().from_("People")
            .take(5)
            .order("LastName")
            .expand("Trips")
            .where("Age", ">", 30)
            .select("FirstName")
            .skip(1)
        )
        q.total_count = True
        assert q.to_request() == (
            "People?$select=FirstName&$filter=Age gt 30&$expand=Trips"
            "&$orderby=LastName asc&$skip=1&$top=5&$count=true"
        )

    def test_to_request_is_idempotent(self, builder):
        q = builder.where("a", 1).select("b").take(2)
        assert q.to_request() == q.to_request()


class TestGrammarV2:
    """Tests for the v2 dialect."""

    @pytest.fixture
    def v2(self):
        return Builder(grammar=GrammarV2()).from_("People")

    def test_substringof_argument_order(self, v2):
        q = v2.where("FirstName", "substringof", "uss")
        assert q.to_request() == "People?$filter=substringof('uss',FirstName)"

    def test_inline_count(self, v2):
        v2.total_count = True
        assert v2.to_request() == "People?$inlinecount=allpages"

    def test_datetime_literal(self, v2):
        q = v2.where("Created", ">", datetime(2020, 1, 2, 3, 4, 5))
        assert q.to_request() == "People?$filter=Created gt datetime'2020-01-02T03:04:05'"

    def test_functions_declared(self):
        g = GrammarV2()
        assert "substringof" in g.get_functions()
        assert "contains" not in g.get_functions()
        assert "in" not in g.get_operators_and_functions()

    def test_is_a_grammar(self):
        assert isinstance(GrammarV2(), IGrammar)
