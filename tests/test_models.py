import pytest
from pydantic import ValidationError

from core.domain.models import (
    ALL_DATABASES,
    DEFAULT_STRATEGY,
    FIRST_MATCH,
    Database,
    Definition,
    LookupReport,
    MatchingStrategy,
)
from core.domain.ordered_set import OrderedSet


def test_database_equality_by_name():
    assert Database(name="wn", description="WordNet") == Database(name="wn", description="other")
    assert hash(Database(name="wn", description="WordNet")) == hash(Database(name="wn"))
    assert Database(name="wn") != Database(name="foo")


def test_database_and_strategy_never_equal():
    assert Database(name="exact") != MatchingStrategy(name="exact")
    assert len({Database(name="exact"), MatchingStrategy(name="exact")}) == 2


def test_records_are_immutable():
    database = Database(name="wn", description="WordNet")
    with pytest.raises(ValidationError):
        database.name = "foo"


def test_name_is_required():
    with pytest.raises(ValidationError):
        Database(name="")


def test_selectors():
    assert ALL_DATABASES.name == "*"
    assert FIRST_MATCH.name == "!"
    assert DEFAULT_STRATEGY.name == "."
    assert str(ALL_DATABASES) == "*"


def test_ordered_set_keeps_first_occurrence_order():
    items = OrderedSet(["prefix", "exact", "prefix", "soundex"])
    assert list(items) == ["prefix", "exact", "soundex"]
    assert len(items) == 3
    assert "exact" in items and "lev" not in items


def test_ordered_set_compares_like_a_set():
    assert OrderedSet(["cat", "cat"]) == {"cat"}
    assert {"cat", "dog"} == OrderedSet(["dog", "cat"])
    assert OrderedSet(["cat"]) != {"dog"}
    assert OrderedSet(["a", "b"]) & {"b"} == {"b"}


def test_lookup_report_found():
    definition = Definition(word="cat", database=Database(name="foo"), text="A small feline.")
    assert LookupReport(word="cat", definitions=[definition]).found
    assert not LookupReport(word="cat").found
