"""Credential Ingest — JSON-LD credential documents to quads.

Normalization is rdflib's JSON-LD parser. Blank nodes are skolemized into
well-known genid IRIs so a snapshot of the store round-trips exactly.
Each document is ingested in isolation: a malformed document is recorded
as a failed IngestResult and the others continue.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from rdflib import RDF, Graph, URIRef

from .errors import ErrorCode, IngestError, ValidationIssue
from .store import FactStore
from .types import DEFAULT_GRAPH, RESULT, Quad

log = logging.getLogger(__name__)


@dataclass
class IngestResult:
    """Outcome of adding one credential document to the graph."""
    source: str
    valid: bool = True
    quads: int = 0
    graph_name: str = ""
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def fail(self, error: IngestError) -> None:
        self.valid = False
        self.errors.append(ValidationIssue.from_error(error, source=self.source))

    def __repr__(self) -> str:
        status = f"{self.quads} quads" if self.valid else "FAILED"
        return f"IngestResult({self.source}: {status})"


# ---------------------------------------------------------------------------
# Single document
# ---------------------------------------------------------------------------

def credential_to_quads(
    document: Mapping[str, Any],
    base: str | None = None,
    use_named_graphs: bool = False,
) -> list[Quad]:
    """Convert a parsed JSON-LD credential into quads.

    The base IRI is the credential's id unless given. With named graphs,
    every quad's graph is that IRI; otherwise quads go to the default graph.
    Raises IngestError when the document cannot be normalized.
    """
    if not isinstance(document, Mapping):
        raise IngestError(
            f"Credential must be a JSON object, got {type(document).__name__}",
            code=ErrorCode.PROCESSING_ERROR,
        )

    base_uri = base or document.get("id") or "urn:unnamed"
    if not isinstance(base_uri, str):
        raise IngestError(f"Credential id must be a string, got {base_uri!r}")

    graph = Graph()
    try:
        graph.parse(data=json.dumps(document), format="json-ld", base=base_uri)
    except Exception as e:
        raise IngestError(f"Error creating RDF graph: {e}") from e

    graph_name = URIRef(base_uri) if use_named_graphs else DEFAULT_GRAPH
    return [Quad(s, p, o, graph_name) for s, p, o in graph.skolemize()]


def trust_anchor_quads(anchors: Iterable[str]) -> list[Quad]:
    """Facts declaring issuers trusted without further attestation."""
    return [Quad(URIRef(a), RDF.type, RESULT.TrustAnchor) for a in anchors]


# ---------------------------------------------------------------------------
# Document collections
# ---------------------------------------------------------------------------

def build_fact_store(
    documents: Mapping[str, Any],
    use_named_graphs: bool = False,
    store: FactStore | None = None,
) -> tuple[FactStore, dict[str, IngestResult]]:
    """Ingest every document into one store.

    documents maps a source label (usually a file path) to parsed JSON.
    Returns the store and one IngestResult per source.
    """
    store = store if store is not None else FactStore()
    results: dict[str, IngestResult] = {}

    for source, document in documents.items():
        result = IngestResult(source=source)
        results[source] = result
        try:
            quads = credential_to_quads(document, use_named_graphs=use_named_graphs)
        except IngestError as e:
            log.warning("Failed to add %s to graph: %s", source, e)
            result.fail(e)
            continue

        if not quads:
            result.warnings.append("Document produced no quads (missing @context?)")
        result.quads = len(quads)
        result.graph_name = str(document.get("id") or "urn:unnamed")
        store.add(quads)
        log.debug("Added %s as %s (%d quads)", source, result.graph_name, len(quads))

    return store, results


def load_credential_files(
    paths: Iterable[str | Path],
) -> tuple[dict[str, Any], dict[str, IngestResult]]:
    """Read JSON credential files.

    Returns (documents, failures): documents keyed by path for the files
    that parsed, and a failed IngestResult for each file that did not.
    """
    documents: dict[str, Any] = {}
    failures: dict[str, IngestResult] = {}
    for path in paths:
        source = str(path)
        try:
            documents[source] = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            result = IngestResult(source=source)
            result.fail(IngestError(
                f"Error processing data: {e}", code=ErrorCode.PROCESSING_ERROR
            ))
            failures[source] = result
    return documents, failures
