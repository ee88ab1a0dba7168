"""Tests for rule well-formedness checks and catalog loading."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib import Namespace, Variable

from credgraph.builtins import Concatenation, EqualTo, ForAllIn
from credgraph.catalog import CATALOG_VERSION, RULE_ORDER, RULES, default_catalog
from credgraph.errors import ErrorCode, RuleCatalogError
from credgraph.rules import Annotation, Rule, RuleCatalog
from credgraph.types import Pattern, pattern

EX = Namespace("http://example.org/")
x, y, z, msg = Variable("x"), Variable("y"), Variable("z"), Variable("msg")


def _rule(rule_id: str, **kwargs) -> Rule:
    defaults = dict(
        antecedent=(pattern(x, EX.p, y),),
        consequent=(pattern(y, EX.q, x),),
    )
    defaults.update(kwargs)
    return Rule(id=rule_id, **defaults)


class TestRuleCheck:
    def test_well_formed(self):
        assert _rule("ok").check() == []

    def test_empty_antecedent(self):
        assert "antecedent is empty" in _rule("r", antecedent=()).check()

    def test_empty_consequent(self):
        assert "consequent is empty" in _rule("r", consequent=()).check()

    def test_unbound_consequent_variable(self):
        problems = _rule("r", consequent=(pattern(x, EX.q, z),)).check()
        assert len(problems) == 1
        assert "?z" in problems[0]

    def test_consequent_with_graph(self):
        problems = _rule("r", consequent=(Pattern(x, EX.q, y, EX.g),)).check()
        assert any("names a graph" in p for p in problems)

    def test_builtin_unbound_input(self):
        problems = _rule("r", builtins=(EqualTo(x, z),)).check()
        assert any("equalTo" in p and "?z" in p for p in problems)

    def test_concatenation_not_allowed_in_builtins(self):
        problems = _rule("r", builtins=(Concatenation((x,), msg),)).check()
        assert any("annotations" in p for p in problems)

    def test_forall_without_set(self):
        problems = _rule("r", builtins=(ForAllIn((), (pattern(x, EX.q, y),)),)).check()
        assert "forAllIn has no set patterns" in problems

    def test_annotation_may_use_its_result(self):
        ann = Annotation(Concatenation(("x=", x), msg), (pattern(x, EX.note, msg),))
        assert _rule("r", annotations=(ann,)).check() == []

    def test_annotation_unbound(self):
        ann = Annotation(Concatenation(("z=", z), msg), (pattern(x, EX.note, msg),))
        problems = _rule("r", annotations=(ann,)).check()
        assert any("annotation uses unbound" in p for p in problems)

    def test_annotation_consequent_unbound(self):
        ann = Annotation(Concatenation(("x=", x), msg), (pattern(z, EX.note, msg),))
        problems = _rule("r", annotations=(ann,)).check()
        assert any("annotation consequent" in p for p in problems)


class TestRuleCatalogLoad:
    def test_sequence_order(self):
        catalog = RuleCatalog.load([_rule("a"), _rule("b"), _rule("c")])
        assert catalog.order == ("a", "b", "c")

    def test_explicit_order(self):
        rules = {r.id: r for r in (_rule("a"), _rule("b"))}
        catalog = RuleCatalog.load(rules, ["b", "a"], version="2")
        assert catalog.order == ("b", "a")
        assert catalog.version == "2"
        assert [r.id for r in catalog] == ["b", "a"]

    def test_get(self):
        catalog = RuleCatalog.load([_rule("a")])
        assert catalog.get("a").id == "a"
        assert catalog.get("missing") is None

    def test_duplicate_definition(self):
        with pytest.raises(RuleCatalogError, match="duplicate rule definition 'a'"):
            RuleCatalog.load([_rule("a"), _rule("a")])

    def test_key_mismatch(self):
        with pytest.raises(RuleCatalogError, match="does not match"):
            RuleCatalog.load({"a": _rule("b")})

    def test_unknown_rule_in_order(self):
        with pytest.raises(RuleCatalogError, match="has no definition"):
            RuleCatalog.load([_rule("a")], ["a", "b"])

    def test_unordered_rule(self):
        with pytest.raises(RuleCatalogError, match="defined but not ordered"):
            RuleCatalog.load([_rule("a"), _rule("b")], ["a"])

    def test_repeated_in_order(self):
        with pytest.raises(RuleCatalogError, match="appears twice"):
            RuleCatalog.load([_rule("a")], ["a", "a"])

    def test_all_problems_reported(self):
        bad = [
            _rule("a", antecedent=()),
            _rule("b", consequent=(pattern(x, EX.q, z),)),
        ]
        with pytest.raises(RuleCatalogError) as exc:
            RuleCatalog.load(bad)
        message = str(exc.value)
        assert "[a] antecedent is empty" in message
        assert "[b] consequent" in message
        assert exc.value.code == ErrorCode.RULE_CATALOG_ERROR


class TestDefaultCatalog:
    def test_every_rule_ordered(self):
        catalog = default_catalog()
        assert catalog.order == RULE_ORDER
        assert set(catalog.order) == set(RULES)
        assert catalog.version == CATALOG_VERSION

    def test_every_rule_well_formed(self):
        for rule in default_catalog():
            assert rule.check() == [], rule.id

    def test_stages_in_order(self):
        order = default_catalog().order
        # each rule runs after the rules whose facts it reads
        assert order.index("credential-issuers") < order.index("conforming-assessments")
        assert order.index("claim-criteria") < order.index("criterion-verified")
        assert order.index("criterion-verified") < order.index("claim-criteria-verified")
        assert order.index("assessment-covers-claim") < order.index("simple-claim-verified")
        assert order.index("identity-anchors") < order.index("trust-anchor-attestations")

    def test_concatenation_only_in_annotations(self):
        for rule in default_catalog():
            assert not any(isinstance(b, Concatenation) for b in rule.builtins)
