"""Built-in predicates evaluated by the rule engine.

Built-ins appear in rule antecedents next to triple patterns. They run
after the patterns have produced bindings and either filter a binding
(EqualTo, ForAllIn) or extend it (Concatenation).

  EqualTo(a, b)                    — same term after substitution
  Concatenation(parts, result)     — string concatenation into a literal
  ForAllIn(set_patterns, test)     — universal quantification

Concatenation exists for human-readable explanations only. The engine
evaluates it in rule annotations, never in a rule's antecedent, so a
failed concatenation cannot block the derivation of facts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rdflib import Literal, Variable

from .errors import BuiltinError
from .store import FactStore
from .types import Pattern, PatternTerm
from .unify import Binding, exists, match_patterns


class Builtin:
    """Base class for built-in predicates."""

    name = "builtin"

    def required_variables(self) -> set[Variable]:
        """Variables that must be bound before the built-in runs."""
        return set()

    def produced_variables(self) -> set[Variable]:
        """Variables the built-in binds."""
        return set()

    def evaluate(self, store: FactStore, binding: Binding) -> list[Binding]:
        raise NotImplementedError


def _ground(term: PatternTerm, binding: Binding, builtin: str) -> PatternTerm:
    value = binding.resolve(term)
    if isinstance(value, Variable):
        raise BuiltinError(f"{builtin}: variable {value.n3()} is unbound")
    return value


# ---------------------------------------------------------------------------
# equalTo
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EqualTo(Builtin):
    """Succeeds iff a and b denote the identical term. No coercion."""
    left: PatternTerm
    right: PatternTerm

    name = "equalTo"

    def required_variables(self) -> set[Variable]:
        return {t for t in (self.left, self.right) if isinstance(t, Variable)}

    def evaluate(self, store: FactStore, binding: Binding) -> list[Binding]:
        a = _ground(self.left, binding, self.name)
        b = _ground(self.right, binding, self.name)
        return [binding] if a == b else []


# ---------------------------------------------------------------------------
# concatenation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Concatenation(Builtin):
    """Concatenate the string forms of parts into a literal bound to result.

    IRIs contribute their string form, literals their lexical value.
    """
    parts: tuple[PatternTerm, ...]
    result: Variable

    name = "concatenation"

    def required_variables(self) -> set[Variable]:
        return {t for t in self.parts if isinstance(t, Variable)}

    def produced_variables(self) -> set[Variable]:
        return {self.result}

    def evaluate(self, store: FactStore, binding: Binding) -> list[Binding]:
        text = "".join(str(_ground(p, binding, self.name)) for p in self.parts)
        extended = binding.extend(self.result, Literal(text))
        return [extended] if extended is not None else []


# ---------------------------------------------------------------------------
# forAllIn
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ForAllIn(Builtin):
    """Every member produced by set_patterns also satisfies test_patterns.

    Members are the bindings of set_patterns extending the current binding.
    With zero members the quantifier holds vacuously; rules that must not
    fire for empty sets guard against it with an extra antecedent pattern.
    """
    set_patterns: tuple[Pattern, ...]
    test_patterns: tuple[Pattern, ...]

    name = "forAllIn"

    def evaluate(self, store: FactStore, binding: Binding) -> list[Binding]:
        for member in match_patterns(store, self.set_patterns, binding):
            if not exists(store, self.test_patterns, member):
                return []
        return [binding]


def for_all_in(set_patterns: Sequence[Pattern], test_patterns: Sequence[Pattern]) -> ForAllIn:
    return ForAllIn(tuple(set_patterns), tuple(test_patterns))
