"""Tests for equalTo, concatenation and forAllIn."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib import Literal, Namespace, Variable, XSD

from credgraph.builtins import Concatenation, EqualTo, ForAllIn, for_all_in
from credgraph.errors import BuiltinError, ErrorCode
from credgraph.store import FactStore
from credgraph.types import Quad, pattern
from credgraph.unify import Binding

EX = Namespace("http://example.org/")
a, b, c, msg = Variable("a"), Variable("b"), Variable("c"), Variable("msg")
claim, crit = Variable("claim"), Variable("crit")


def _claims_store(verified: list) -> FactStore:
    """claim1 has criteria c1 and c2; verified lists the verified ones."""
    store = FactStore([
        Quad(EX.claim1, EX.criterion, EX.c1),
        Quad(EX.claim1, EX.criterion, EX.c2),
    ])
    store.add(Quad(EX.claim1, EX.verified, v) for v in verified)
    return store


class TestEqualTo:
    def test_same_iri(self):
        binding = Binding({a: EX.x, b: EX.x})
        assert EqualTo(a, b).evaluate(FactStore(), binding) == [binding]

    def test_different_iri(self):
        binding = Binding({a: EX.x, b: EX.y})
        assert EqualTo(a, b).evaluate(FactStore(), binding) == []

    def test_constant(self):
        binding = Binding({a: EX.x})
        assert EqualTo(a, EX.x).evaluate(FactStore(), binding) == [binding]

    def test_no_type_coercion(self):
        binding = Binding({a: Literal("1"), b: Literal(1)})
        assert EqualTo(a, b).evaluate(FactStore(), binding) == []

    def test_literal_language_matters(self):
        binding = Binding({a: Literal("x", lang="en"), b: Literal("x")})
        assert EqualTo(a, b).evaluate(FactStore(), binding) == []

    def test_unbound_raises(self):
        with pytest.raises(BuiltinError) as exc:
            EqualTo(a, b).evaluate(FactStore(), Binding({a: EX.x}))
        assert exc.value.code == ErrorCode.BUILTIN_ERROR
        assert "?b" in str(exc.value)

    def test_required_variables(self):
        assert EqualTo(a, EX.x).required_variables() == {a}


class TestConcatenation:
    def test_iri_and_literal_parts(self):
        concat = Concatenation(("Criterion ", a, " verified by ", b), msg)
        binding = Binding({a: EX.c1, b: Literal("Acme")})
        [result] = concat.evaluate(FactStore(), binding)
        assert result[msg] == Literal(f"Criterion {EX.c1} verified by Acme")

    def test_typed_literal_uses_lexical_form(self):
        concat = Concatenation((a, "/", b), msg)
        binding = Binding({a: Literal(3), b: Literal("4", datatype=XSD.integer)})
        [result] = concat.evaluate(FactStore(), binding)
        assert result[msg] == Literal("3/4")

    def test_result_is_plain_string_literal(self):
        concat = Concatenation(("x",), msg)
        [result] = concat.evaluate(FactStore(), Binding())
        assert result[msg].datatype is None
        assert result[msg].language is None

    def test_unbound_part_raises(self):
        concat = Concatenation(("x", a), msg)
        with pytest.raises(BuiltinError):
            concat.evaluate(FactStore(), Binding())

    def test_result_already_bound_differently(self):
        concat = Concatenation(("x",), msg)
        binding = Binding({msg: Literal("y")})
        assert concat.evaluate(FactStore(), binding) == []

    def test_variables(self):
        concat = Concatenation(("x", a, b), msg)
        assert concat.required_variables() == {a, b}
        assert concat.produced_variables() == {msg}


class TestForAllIn:
    def _quantifier(self) -> ForAllIn:
        return for_all_in(
            [pattern(claim, EX.criterion, crit)],
            [pattern(claim, EX.verified, crit)],
        )

    def test_all_members_pass(self):
        store = _claims_store([EX.c1, EX.c2])
        binding = Binding({claim: EX.claim1})
        assert self._quantifier().evaluate(store, binding) == [binding]

    def test_one_member_fails(self):
        store = _claims_store([EX.c1])
        binding = Binding({claim: EX.claim1})
        assert self._quantifier().evaluate(store, binding) == []

    def test_empty_set_is_vacuously_true(self):
        store = _claims_store([])
        binding = Binding({claim: EX.other})
        assert self._quantifier().evaluate(store, binding) == [binding]

    def test_binding_is_not_extended(self):
        store = _claims_store([EX.c1, EX.c2])
        [result] = self._quantifier().evaluate(store, Binding({claim: EX.claim1}))
        assert crit not in result

    def test_extra_facts_do_not_matter(self):
        store = _claims_store([EX.c1, EX.c2, EX.c3])
        binding = Binding({claim: EX.claim1})
        assert self._quantifier().evaluate(store, binding) == [binding]

    def test_multi_pattern_test(self):
        store = _claims_store([EX.c1, EX.c2])
        store.add([Quad(EX.c1, EX.level, Literal("high"))])
        quantifier = for_all_in(
            [pattern(claim, EX.criterion, crit)],
            [pattern(claim, EX.verified, crit), pattern(crit, EX.level, c)],
        )
        binding = Binding({claim: EX.claim1})
        assert quantifier.evaluate(store, binding) == []
        store.add([Quad(EX.c2, EX.level, Literal("low"))])
        assert quantifier.evaluate(store, binding) == [binding]
