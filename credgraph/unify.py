"""Pattern Matcher — conjunctive queries over the fact store.

Given a conjunction of Patterns and a partial Binding, the matcher extends
the binding by scanning the store for quads matching each pattern in turn,
pruning branches where a variable would be bound to two different terms.
This is a backtracking join; built-in predicates are not interpreted here.

The next pattern to evaluate is always the one with the most positions
already bound (most-constrained-first). That choice only affects how much
of the store is scanned, never the set of bindings returned.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterator, Sequence

from rdflib import Variable

from .store import FactStore
from .types import Pattern, PatternTerm, Quad, Term


class Binding(Mapping):
    """Immutable mapping from Variable to the term it matched."""

    __slots__ = ("_map", "_hash")

    def __init__(self, items: Mapping[Variable, Term] | None = None) -> None:
        self._map: dict[Variable, Term] = dict(items or {})
        self._hash: int | None = None

    def __getitem__(self, key: Variable) -> Term:
        return self._map[key]

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._map)

    def __len__(self) -> int:
        return len(self._map)

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._map.items()))
        return self._hash

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Binding):
            return self._map == other._map
        return NotImplemented

    def extend(self, var: Variable, term: Term) -> Binding | None:
        """Bind var to term; None if var is already bound to another term."""
        current = self._map.get(var)
        if current is not None:
            return self if current == term else None
        extended = dict(self._map)
        extended[var] = term
        return Binding(extended)

    def resolve(self, term: PatternTerm | None) -> PatternTerm | None:
        """Substitute term if it is a bound variable."""
        if isinstance(term, Variable):
            return self._map.get(term, term)
        return term

    def __repr__(self) -> str:
        inner = ", ".join(f"{k.n3()}={v.n3()}" for k, v in self._map.items())
        return f"Binding({inner})"


# ---------------------------------------------------------------------------
# Single pattern
# ---------------------------------------------------------------------------

def unify_quad(pat: Pattern, quad: Quad, binding: Binding) -> Binding | None:
    """Unify one pattern with one quad under an existing binding."""
    result: Binding | None = binding
    for term, value in zip(pat.terms, (quad.subject, quad.predicate, quad.object, quad.graph)):
        if term is None:
            continue
        term = result.resolve(term)
        if isinstance(term, Variable):
            result = result.extend(term, value)
        elif term != value:
            result = None
        if result is None:
            return None
    return result


def _lookup_key(pat: Pattern, binding: Binding) -> tuple:
    return tuple(
        None if t is None or isinstance(t, Variable) else t
        for t in (binding.resolve(t) for t in pat.terms)
    )


def _bound_positions(pat: Pattern, binding: Binding) -> int:
    return sum(1 for t in _lookup_key(pat, binding) if t is not None)


def match_pattern(store: FactStore, pat: Pattern, binding: Binding) -> list[Binding]:
    s, p, o, g = _lookup_key(pat, binding)
    results = []
    for quad in store.match(s, p, o, g):
        extended = unify_quad(pat, quad, binding)
        if extended is not None:
            results.append(extended)
    return results


# ---------------------------------------------------------------------------
# Conjunctions
# ---------------------------------------------------------------------------

def match_patterns(
    store: FactStore,
    patterns: Sequence[Pattern],
    binding: Binding | None = None,
) -> list[Binding]:
    """Return every full binding satisfying all patterns.

    The result is a list of distinct bindings (a set in list form);
    callers must not rely on its order.
    """
    start = binding if binding is not None else Binding()
    if not patterns:
        return [start]

    results: list[Binding] = []
    seen: set[Binding] = set()
    # Explicit stack of (binding, remaining patterns)
    stack: list[tuple[Binding, tuple[Pattern, ...]]] = [(start, tuple(patterns))]
    while stack:
        current, remaining = stack.pop()
        if not remaining:
            if current not in seen:
                seen.add(current)
                results.append(current)
            continue

        idx = max(
            range(len(remaining)),
            key=lambda i: (_bound_positions(remaining[i], current), -i),
        )
        pat = remaining[idx]
        rest = remaining[:idx] + remaining[idx + 1:]
        for extended in match_pattern(store, pat, current):
            stack.append((extended, rest))

    return results


def exists(
    store: FactStore,
    patterns: Sequence[Pattern],
    binding: Binding | None = None,
) -> bool:
    """True if at least one binding satisfies all patterns."""
    return bool(match_patterns(store, patterns, binding))


def substitute(pat: Pattern, binding: Binding) -> tuple[PatternTerm | None, ...]:
    """Apply a binding to every position of a pattern."""
    return tuple(binding.resolve(t) for t in pat.terms)
