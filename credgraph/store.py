"""Fact Store — append-only set of quads.

The store owns every fact of one validation run: ingested credential quads,
configured trust anchors, and facts derived by the rule engine. Facts are
only ever added, never removed, so the store after any inference pass is a
superset of the store before it.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Iterator

from rdflib import Literal, URIRef

from .types import Quad, Term


class FactStore:
    """A set of quads with wildcard lookup.

    Lookups use per-position indexes (subject, predicate, object); the most
    selective bound position is scanned and the others are filtered.
    Enumeration order is unspecified.
    """

    def __init__(self, quads: Iterable[Quad] = ()) -> None:
        self._quads: set[Quad] = set()
        self._by_subject: dict[Term, set[Quad]] = defaultdict(set)
        self._by_predicate: dict[Term, set[Quad]] = defaultdict(set)
        self._by_object: dict[Term, set[Quad]] = defaultdict(set)
        self.add(quads)

    # -----------------------------------------------------------------------
    # Mutation
    # -----------------------------------------------------------------------

    def add(self, quads: Iterable[Quad]) -> list[Quad]:
        """Merge quads into the store; returns those that were not present."""
        added: list[Quad] = []
        for q in quads:
            if not isinstance(q, Quad):
                raise TypeError(f"FactStore accepts Quad values, got {type(q).__name__}")
            if q in self._quads:
                continue
            self._quads.add(q)
            self._by_subject[q.subject].add(q)
            self._by_predicate[q.predicate].add(q)
            self._by_object[q.object].add(q)
            added.append(q)
        return added

    # -----------------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------------

    def match(
        self,
        s: Term | None = None,
        p: Term | None = None,
        o: Term | None = None,
        g: Term | None = None,
    ) -> list[Quad]:
        """Return all quads equal to each non-None argument."""
        candidates: list[set[Quad]] = []
        if s is not None:
            candidates.append(self._by_subject.get(s, set()))
        if p is not None:
            candidates.append(self._by_predicate.get(p, set()))
        if o is not None:
            candidates.append(self._by_object.get(o, set()))

        if candidates:
            pool: Iterable[Quad] = min(candidates, key=len)
        else:
            pool = self._quads

        return [
            q for q in pool
            if (s is None or q.subject == s)
            and (p is None or q.predicate == p)
            and (o is None or q.object == o)
            and (g is None or q.graph == g)
        ]

    def objects(self, s: Term, p: URIRef) -> list[Term]:
        """Distinct objects of (s, p, ?), across all graphs."""
        return list(dict.fromkeys(q.object for q in self.match(s, p)))

    def subjects(self, p: URIRef, o: Term) -> list[Term]:
        """Distinct subjects of (?, p, o), across all graphs."""
        return list(dict.fromkeys(q.subject for q in self.match(None, p, o)))

    def value(self, s: Term, p: URIRef) -> Term | None:
        """One object of (s, p, ?), or None.

        When several objects exist the smallest by string form is returned
        so repeated calls agree.
        """
        objs = self.objects(s, p)
        if not objs:
            return None
        return min(objs, key=lambda t: (isinstance(t, Literal), str(t)))

    def size(self) -> int:
        return len(self._quads)

    def quads(self) -> frozenset[Quad]:
        """Immutable snapshot of the current contents."""
        return frozenset(self._quads)

    def __len__(self) -> int:
        return len(self._quads)

    def __contains__(self, q: object) -> bool:
        return q in self._quads

    def __iter__(self) -> Iterator[Quad]:
        return iter(list(self._quads))

    def __repr__(self) -> str:
        return f"FactStore({len(self._quads)} quads)"
