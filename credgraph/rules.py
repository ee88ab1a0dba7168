"""Rules and the ordered rule catalog.

A Rule is an immutable value:

  antecedent  — triple patterns that must all match
  builtins    — filters evaluated on each antecedent binding
  consequent  — triple patterns instantiated into new facts
  annotations — explanation strings built with Concatenation, each with
                its own consequent; evaluated separately so a failure
                never blocks the rule's facts

The catalog fixes the order in which rules run. Order is an explicit tuple
of rule ids; later rules may depend on facts earlier rules derived.
Every rule is checked when the catalog is built: consequent variables must
be bound by the antecedent (range restriction), built-in inputs must be
bound before the built-in runs, ids must be unique and all present.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Sequence

from rdflib import Variable

from .builtins import Builtin, Concatenation, ForAllIn
from .errors import RuleCatalogError
from .types import Pattern


@dataclass(frozen=True)
class Annotation:
    """A Concatenation plus the facts that carry its result."""
    concatenation: Concatenation
    consequent: tuple[Pattern, ...]


@dataclass(frozen=True)
class Rule:
    """An inference rule: antecedent ⇒ consequent."""
    id: str
    antecedent: tuple[Pattern, ...]
    consequent: tuple[Pattern, ...]
    builtins: tuple[Builtin, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    description: str = ""

    def antecedent_variables(self) -> set[Variable]:
        bound: set[Variable] = set()
        for pat in self.antecedent:
            bound |= pat.variables()
        return bound

    def check(self) -> list[str]:
        """Return load-time problems with this rule (empty if well-formed)."""
        problems: list[str] = []
        if not self.antecedent:
            problems.append("antecedent is empty")
        if not self.consequent:
            problems.append("consequent is empty")

        bound = self.antecedent_variables()

        for builtin in self.builtins:
            if isinstance(builtin, Concatenation):
                problems.append(
                    "concatenation may only appear in annotations"
                )
                continue
            missing = builtin.required_variables() - bound
            if missing:
                problems.append(
                    f"{builtin.name} uses unbound variable(s) {_names(missing)}"
                )
            if isinstance(builtin, ForAllIn) and not builtin.set_patterns:
                problems.append("forAllIn has no set patterns")

        for pat in self.consequent:
            if pat.graph is not None:
                problems.append(f"consequent {pat!r} names a graph")
            unbound = pat.variables() - bound
            if unbound:
                problems.append(
                    f"consequent {pat!r} uses unbound variable(s) {_names(unbound)}"
                )

        for ann in self.annotations:
            missing = ann.concatenation.required_variables() - bound
            if missing:
                problems.append(
                    f"annotation uses unbound variable(s) {_names(missing)}"
                )
            available = bound | ann.concatenation.produced_variables()
            for pat in ann.consequent:
                unbound = pat.variables() - available
                if unbound:
                    problems.append(
                        f"annotation consequent {pat!r} uses unbound "
                        f"variable(s) {_names(unbound)}"
                    )
        return problems

    def __repr__(self) -> str:
        return f"Rule({self.id})"


def _names(variables: set[Variable]) -> str:
    return ", ".join(sorted(v.n3() for v in variables))


@dataclass(frozen=True)
class RuleCatalog:
    """An ordered, validated sequence of rules."""
    rules: tuple[Rule, ...] = field(default_factory=tuple)
    version: str = ""

    @staticmethod
    def load(
        definitions: Mapping[str, Rule] | Sequence[Rule],
        order: Sequence[str] | None = None,
        version: str = "",
    ) -> RuleCatalog:
        """Build a catalog from rule definitions and an explicit order.

        definitions may be a mapping of id → Rule or a sequence of rules.
        When order is None the sequence order of definitions is used.
        Raises RuleCatalogError listing every problem found.
        """
        errors: list[str] = []

        if isinstance(definitions, Mapping):
            by_id = dict(definitions)
            for key, rule in by_id.items():
                if key != rule.id:
                    errors.append(f"definition key '{key}' does not match rule id '{rule.id}'")
        else:
            by_id = {}
            for rule in definitions:
                if rule.id in by_id:
                    errors.append(f"duplicate rule definition '{rule.id}'")
                by_id[rule.id] = rule

        if order is None:
            order = list(by_id)

        seen: set[str] = set()
        ordered: list[Rule] = []
        for rule_id in order:
            if rule_id in seen:
                errors.append(f"rule '{rule_id}' appears twice in the order")
                continue
            seen.add(rule_id)
            rule = by_id.get(rule_id)
            if rule is None:
                errors.append(f"rule '{rule_id}' in the order has no definition")
                continue
            ordered.append(rule)

        for rule_id in by_id:
            if rule_id not in seen:
                errors.append(f"rule '{rule_id}' is defined but not ordered")

        for rule in ordered:
            errors.extend(f"[{rule.id}] {p}" for p in rule.check())

        if errors:
            raise RuleCatalogError(
                "Invalid rule catalog:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        return RuleCatalog(rules=tuple(ordered), version=version)

    @property
    def order(self) -> tuple[str, ...]:
        return tuple(r.id for r in self.rules)

    def get(self, rule_id: str) -> Rule | None:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        v = f" v{self.version}" if self.version else ""
        return f"RuleCatalog({len(self.rules)} rules{v})"
