"""Snapshot — N-Quads export and import of a fact store.

Export writes one line per quad, sorted, so two stores with the same
contents produce identical text. Quads in the default graph are written
without a graph label. Import uses rdflib's N-Quads parser.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rdflib import Dataset, Literal
from rdflib.graph import DATASET_DEFAULT_GRAPH_ID

from .store import FactStore
from .types import DEFAULT_GRAPH, Quad

log = logging.getLogger(__name__)


def _term(term) -> str:
    if not isinstance(term, Literal):
        return term.n3()
    # N-Quads literals are single-line; escape instead of triple-quoting
    lexical = (
        str(term).replace("\\", "\\\\").replace('"', '\\"')
        .replace("\n", "\\n").replace("\r", "\\r")
    )
    if term.language:
        return f'"{lexical}"@{term.language}'
    if term.datatype:
        return f'"{lexical}"^^<{term.datatype}>'
    return f'"{lexical}"'


def quad_to_nquads(q: Quad) -> str:
    parts = [q.subject.n3(), q.predicate.n3(), _term(q.object)]
    if q.graph != DEFAULT_GRAPH:
        parts.append(q.graph.n3())
    return " ".join(parts) + " ."


def export_nquads(store: FactStore) -> str:
    """Serialize every quad in the store as sorted N-Quads text."""
    lines = sorted(quad_to_nquads(q) for q in store)
    return "\n".join(lines) + ("\n" if lines else "")


def import_nquads(text: str, store: FactStore | None = None) -> FactStore:
    """Parse N-Quads text into a (new or given) fact store."""
    store = store if store is not None else FactStore()
    ds = Dataset()
    ds.parse(data=text, format="nquads")
    quads = []
    for s, p, o, g in ds.quads((None, None, None, None)):
        quads.append(Quad(s, p, o, _graph_id(g)))
    store.add(quads)
    return store


def _graph_id(g):
    # rdflib yields a Graph, an identifier, or None for the default graph
    # depending on version
    g = getattr(g, "identifier", g)
    if g is None or g == DATASET_DEFAULT_GRAPH_ID:
        return DEFAULT_GRAPH
    return g


def save_graph(store: FactStore, path: str | Path = "credential-graph.nq") -> Path:
    """Write the store's snapshot to path and return it."""
    target = Path(path)
    target.write_text(export_nquads(store), encoding="utf-8")
    log.info("Saved %d quads to %s", len(store), target)
    return target


def load_graph(path: str | Path) -> FactStore:
    """Read a snapshot written by save_graph."""
    return import_nquads(Path(path).read_text(encoding="utf-8"))
