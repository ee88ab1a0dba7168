"""Graph validation — ingest, infer, resolve.

A run composes the three layers of the engine:

  STEP 1 — Ingest:  every credential document becomes quads in one store.
                    If any document fails, the run is FATAL and no
                    inference happens (conclusions over a partial graph
                    would be misleading).
  STEP 2 — Infer:   trust anchors are asserted, then the rule catalog is
                    applied once in order. A failed rule makes the run
                    PARTIAL: the store holds an indeterminate subset of
                    the derived facts.
  STEP 3 — Resolve: products, claims and criteria with their verification
                    status, and the unattested issuers of every passport.

The report is valid only for a SUCCESS run in which every claim is
verified and every issuer is attested.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from .config import Settings, get_settings
from .engine import InferenceRun, RuleEngine
from .errors import ValidationIssue
from .ingest import IngestResult, build_fact_store, trust_anchor_quads
from .resolver import (
    Claim,
    Product,
    list_claims,
    product_passports,
    self_attested_anchors,
    unattested_issuers,
)
from .rules import RuleCatalog
from .snapshot import save_graph
from .store import FactStore

log = logging.getLogger(__name__)


class RunStatus(Enum):
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"  # some rule failed; derived facts incomplete
    FATAL = "FATAL"      # ingest failed; no inference


@dataclass
class GraphValidationReport:
    """Result of validating a collection of credentials as a graph."""
    status: RunStatus
    store: FactStore
    ingest: dict[str, IngestResult] = field(default_factory=dict)
    inference: InferenceRun | None = None
    products: list[Product] = field(default_factory=list)
    unattested: dict[str, list[str]] = field(default_factory=dict)
    self_attested: list[str] = field(default_factory=list)
    errors: list[ValidationIssue] = field(default_factory=list)
    snapshot: str = ""

    @property
    def total_claims(self) -> int:
        return sum(len(p.claims) for p in self.products)

    @property
    def verified_claims(self) -> int:
        return sum(p.verified_claims for p in self.products)

    def unverified_claims(self) -> list[tuple[Product, Claim]]:
        return [(p, c) for p in self.products for c in p.claims if not c.verified]

    def unattested_issuers(self) -> list[str]:
        return sorted({i for issuers in self.unattested.values() for i in issuers})

    @property
    def valid_files(self) -> int:
        return sum(1 for r in self.ingest.values() if r.valid)

    @property
    def is_valid(self) -> bool:
        return (
            self.status == RunStatus.SUCCESS
            and self.total_claims > 0
            and self.verified_claims == self.total_claims
            and not self.unattested_issuers()
        )

    def summary(self) -> str:
        lines = []
        lines.append(f"Graph validation: {'VALID' if self.is_valid else 'INVALID'} ({self.status.value})")
        lines.append("-" * 50)
        lines.append(f"  Credentials added: {self.valid_files}/{len(self.ingest)}")
        for result in self.ingest.values():
            for e in result.errors:
                lines.append(f"    - {e!r}")
            for w in result.warnings:
                lines.append(f"    - {result.source}: {w}")

        if self.status == RunStatus.FATAL:
            failed = len(self.ingest) - self.valid_files
            lines.append(f"  Graph analysis skipped: {failed} of {len(self.ingest)} files failed")
            return "\n".join(lines)

        if self.inference is not None:
            state = "applied" if self.inference.succeeded else "FAILED"
            lines.append(f"  Inference rules {state}; {len(self.store)} quads in graph")
            for e in self.inference.errors:
                lines.append(f"    - {e!r}")

        for product in self.products:
            lines.append(f"  Product: \"{product.name}\" ({product.id})")
            issuers = sorted({
                i for passport in product.passport_ids for i in self.unattested.get(passport, [])
            })
            if issuers:
                lines.append(f"    Unattested issuers: {', '.join(issuers)}")
            else:
                lines.append("    All issuers are attested")
            for claim in product.claims:
                mark = "✓" if claim.verified else "✗"
                if claim.criteria:
                    info = f" ({claim.verified_criteria}/{len(claim.criteria)} criteria verified)"
                else:
                    info = " (simple claim)"
                lines.append(f"    {mark} Claim topic: {claim.topic}{info}")
                for crit in claim.criteria:
                    if crit.verified:
                        who = crit.verifier_name or crit.verified_by
                        lines.append(f"        ✓ {crit.name or crit.id} (verified by {who})")
                    else:
                        lines.append(f"        ✗ {crit.name or crit.id} (not verified)")

        described = {p for product in self.products for p in product.passport_ids}
        for passport, issuers in sorted(self.unattested.items()):
            if issuers and passport not in described:
                lines.append(f"  Passport {passport}: unattested issuers: {', '.join(issuers)}")
        if self.self_attested:
            lines.append(
                f"  Self-attested identity anchors (not counted): {', '.join(self.self_attested)}"
            )

        lines.append(
            f"  Total claims: {self.total_claims}, Verified: {self.verified_claims}, "
            f"Unverified: {self.total_claims - self.verified_claims}"
        )
        if self.total_claims == 0:
            lines.append("  No product claims found in the credentials")
        return "\n".join(lines)


def validate_graph(
    documents: Mapping[str, Any],
    trust_anchors: Iterable[str] | None = None,
    settings: Settings | None = None,
    catalog: RuleCatalog | None = None,
    failures: Mapping[str, IngestResult] | None = None,
) -> GraphValidationReport:
    """Validate credentials as a trust graph.

    documents maps a source label to a parsed JSON-LD credential.
    trust_anchors overrides the configured anchors. failures carries
    documents that could not even be read (see load_credential_files);
    they count as ingest failures.
    """
    settings = settings or get_settings()
    anchors = list(trust_anchors) if trust_anchors is not None else list(settings.trust_anchors)

    store, results = build_fact_store(documents, use_named_graphs=settings.use_named_graphs)
    if failures:
        results.update(failures)

    report = GraphValidationReport(status=RunStatus.SUCCESS, store=store, ingest=results)
    for result in results.values():
        report.errors.extend(result.errors)

    if not results or report.valid_files != len(results):
        report.status = RunStatus.FATAL
        log.warning(
            "Skipping graph analysis: %d of %d documents failed",
            len(results) - report.valid_files, len(results),
        )
        return report

    store.add(trust_anchor_quads(anchors))
    report.inference = RuleEngine(catalog).run(store)
    if not report.inference.succeeded:
        report.status = RunStatus.PARTIAL
        report.errors.extend(report.inference.errors)

    report.products = list_claims(store)
    for passport in product_passports(store):
        report.unattested[passport] = unattested_issuers(store, passport)
    report.self_attested = self_attested_anchors(store)

    if settings.snapshot_path:
        report.snapshot = str(save_graph(store, settings.snapshot_path))

    log.info(
        "Validated %d credentials: %d/%d claims verified, %d unattested issuers",
        len(results), report.verified_claims, report.total_claims,
        len(report.unattested_issuers()),
    )
    return report
