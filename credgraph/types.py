"""Core types for the credential trust graph.

Terms are rdflib terms throughout:

  URIRef   = IRI
  BNode    = blank node
  Literal  = literal (lexical value + datatype / language)
  Variable = pattern variable (never stored)

A Quad is a fact; a Pattern is a quad template that may contain variables
and is matched against the fact store by the unifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from rdflib import BNode, Literal, Namespace, URIRef, Variable
from rdflib.graph import DATASET_DEFAULT_GRAPH_ID


# ---------------------------------------------------------------------------
# Namespaces
# ---------------------------------------------------------------------------

VC = Namespace("https://www.w3.org/2018/credentials#")
UNTP = Namespace("https://test.uncefact.org/vocabulary/untp/core/0/")
RESULT = Namespace("http://example.org/result#")

# The unnamed graph of a dataset. Quads ingested without named graphs and
# all derived facts live here.
DEFAULT_GRAPH = DATASET_DEFAULT_GRAPH_ID


Term = Union[URIRef, BNode, Literal]
PatternTerm = Union[URIRef, BNode, Literal, Variable]


# ---------------------------------------------------------------------------
# Quad: a single fact
# ---------------------------------------------------------------------------

def _check(position: str, term: object, allowed: tuple[type, ...]) -> None:
    if not isinstance(term, allowed):
        names = "|".join(t.__name__ for t in allowed)
        raise TypeError(
            f"Quad {position} must be {names}, got {type(term).__name__}: {term!r}"
        )


@dataclass(frozen=True)
class Quad:
    """subject–predicate–object fact plus its graph.

    Identity is value equality of all four fields, so a set of quads
    collapses duplicates.
    """
    subject: URIRef | BNode
    predicate: URIRef
    object: Term
    graph: URIRef | BNode = DEFAULT_GRAPH

    def __post_init__(self) -> None:
        _check("subject", self.subject, (URIRef, BNode))
        _check("predicate", self.predicate, (URIRef,))
        _check("object", self.object, (URIRef, BNode, Literal))
        _check("graph", self.graph, (URIRef, BNode))

    @property
    def triple(self) -> tuple[Term, Term, Term]:
        return (self.subject, self.predicate, self.object)

    def __repr__(self) -> str:
        g = "" if self.graph == DEFAULT_GRAPH else f" {self.graph.n3()}"
        return (
            f"Quad({self.subject.n3()} {self.predicate.n3()} "
            f"{self.object.n3()}{g})"
        )


# ---------------------------------------------------------------------------
# Pattern: a quad template
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Pattern:
    """A quad template whose positions may be variables.

    The graph position defaults to None, a wildcard: rule patterns match
    facts in any graph.
    """
    subject: PatternTerm
    predicate: PatternTerm
    object: PatternTerm
    graph: PatternTerm | None = None

    @property
    def terms(self) -> tuple[PatternTerm | None, ...]:
        return (self.subject, self.predicate, self.object, self.graph)

    def variables(self) -> set[Variable]:
        return {t for t in self.terms if isinstance(t, Variable)}

    def __repr__(self) -> str:
        parts = " ".join(t.n3() for t in self.terms[:3])
        return f"Pattern({parts})"


def pattern(s: PatternTerm, p: PatternTerm, o: PatternTerm) -> Pattern:
    """Shorthand used by the rule catalog."""
    return Pattern(s, p, o)
