"""Tests for the fact store: idempotent adds, wildcard lookup, term checks."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib import BNode, Literal, Namespace, Variable, XSD

from credgraph.store import FactStore
from credgraph.types import DEFAULT_GRAPH, Quad

EX = Namespace("http://example.org/")


def _store() -> FactStore:
    return FactStore([
        Quad(EX.alice, EX.knows, EX.bob),
        Quad(EX.alice, EX.knows, EX.carol),
        Quad(EX.bob, EX.knows, EX.carol),
        Quad(EX.alice, EX.name, Literal("Alice")),
        Quad(EX.bob, EX.name, Literal("Bob"), EX.g1),
    ])


class TestQuad:
    def test_default_graph(self):
        q = Quad(EX.a, EX.p, EX.b)
        assert q.graph == DEFAULT_GRAPH

    def test_value_equality(self):
        assert Quad(EX.a, EX.p, Literal("x")) == Quad(EX.a, EX.p, Literal("x"))
        assert Quad(EX.a, EX.p, EX.b) != Quad(EX.a, EX.p, EX.b, EX.g1)

    def test_literal_subject_rejected(self):
        with pytest.raises(TypeError):
            Quad(Literal("a"), EX.p, EX.b)

    def test_blank_predicate_rejected(self):
        with pytest.raises(TypeError):
            Quad(EX.a, BNode(), EX.b)

    def test_variable_rejected(self):
        with pytest.raises(TypeError):
            Quad(EX.a, EX.p, Variable("x"))

    def test_plain_string_rejected(self):
        with pytest.raises(TypeError):
            Quad(EX.a, EX.p, "not a term")

    def test_literal_datatype_distinguishes(self):
        a = Quad(EX.a, EX.p, Literal("1"))
        b = Quad(EX.a, EX.p, Literal("1", datatype=XSD.integer))
        assert a != b


class TestAdd:
    def test_size(self):
        assert _store().size() == 5
        assert len(_store()) == 5

    def test_duplicates_collapse(self):
        store = _store()
        added = store.add([Quad(EX.alice, EX.knows, EX.bob)])
        assert added == []
        assert len(store) == 5

    def test_returns_only_new(self):
        store = _store()
        new = Quad(EX.carol, EX.knows, EX.alice)
        added = store.add([Quad(EX.alice, EX.knows, EX.bob), new, new])
        assert added == [new]
        assert len(store) == 6

    def test_same_triple_other_graph_is_distinct(self):
        store = _store()
        store.add([Quad(EX.alice, EX.knows, EX.bob, EX.g2)])
        assert len(store) == 6

    def test_rejects_non_quads(self):
        with pytest.raises(TypeError):
            FactStore().add([(EX.a, EX.p, EX.b)])

    def test_contains(self):
        store = _store()
        assert Quad(EX.alice, EX.knows, EX.bob) in store
        assert Quad(EX.carol, EX.knows, EX.bob) not in store


class TestMatch:
    def test_all_wildcards(self):
        assert len(_store().match()) == 5

    def test_subject(self):
        assert len(_store().match(EX.alice)) == 3

    def test_predicate_object(self):
        quads = _store().match(None, EX.knows, EX.carol)
        assert {q.subject for q in quads} == {EX.alice, EX.bob}

    def test_graph(self):
        quads = _store().match(g=EX.g1)
        assert quads == [Quad(EX.bob, EX.name, Literal("Bob"), EX.g1)]

    def test_default_graph_only(self):
        assert len(_store().match(g=DEFAULT_GRAPH)) == 4

    def test_no_match(self):
        assert _store().match(EX.nobody) == []
        assert _store().match(EX.alice, EX.knows, EX.alice) == []

    def test_literal_object(self):
        assert len(_store().match(o=Literal("Alice"))) == 1
        assert _store().match(o=Literal("Alice", lang="en")) == []


class TestConvenience:
    def test_objects(self):
        assert set(_store().objects(EX.alice, EX.knows)) == {EX.bob, EX.carol}

    def test_subjects(self):
        assert set(_store().subjects(EX.knows, EX.carol)) == {EX.alice, EX.bob}

    def test_value_across_graphs(self):
        assert _store().value(EX.bob, EX.name) == Literal("Bob")

    def test_value_missing(self):
        assert _store().value(EX.carol, EX.name) is None

    def test_value_is_stable(self):
        store = _store()
        assert store.value(EX.alice, EX.knows) == EX.bob

    def test_snapshot_is_immutable(self):
        store = _store()
        snap = store.quads()
        store.add([Quad(EX.x, EX.p, EX.y)])
        assert len(snap) == 5
        assert len(store) == 6
