"""Trust / Claim Resolver — read verification conclusions from the store.

Runs after the rule engine. Everything here is a projection of derived
facts (RESULT namespace); the views are rebuilt on every call and never
written back, so the store stays the single source of truth.

Claim verification:
  - a claim with criteria is verified iff every criterion has a
    result:verifiedCriterion fact for that claim
  - a claim without criteria is verified iff a conforming assessment of
    the same product and topic exists (result:hasVerifiedClaim)

Issuer attestation:
  An issuer is attested iff a walk over result:identityAttestedBy edges,
  starting at the issuer, reaches a result:TrustAnchor (zero or more hops).
  Walks keep a visited set, so cyclic anchor graphs terminate and count as
  unattested unless some member of the cycle reaches an anchor.
  Every product passport is checked, including a second passport for the
  same product and a passport that names no product.

Credential data is untrusted: missing names or topics degrade to "" and
missing facts to "unverified"; nothing here raises on a malformed graph.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from rdflib import RDF, Literal, URIRef, Variable

from .store import FactStore
from .types import RESULT, Term, pattern
from .unify import match_patterns

log = logging.getLogger(__name__)

TRUE = Literal(True)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Criterion:
    """One criterion of a claim, with the issuer that verified it (if any)."""
    id: str
    name: str = ""
    verified_by: str | None = None
    verifier_name: str = ""

    @property
    def verified(self) -> bool:
        return self.verified_by is not None

    def __repr__(self) -> str:
        mark = "✓" if self.verified else "✗"
        return f"Criterion({mark} {self.name or self.id})"


@dataclass(frozen=True)
class Claim:
    """A conformity claim made for a product."""
    id: str
    topic: str = ""
    verified: bool = False
    criteria: tuple[Criterion, ...] = ()
    attested_by: tuple[str, ...] = ()
    explanations: tuple[str, ...] = ()

    @property
    def is_simple(self) -> bool:
        return not self.criteria

    @property
    def verified_criteria(self) -> int:
        return sum(1 for c in self.criteria if c.verified)

    def __repr__(self) -> str:
        mark = "✓" if self.verified else "✗"
        return f"Claim({mark} {self.topic or self.id}, {self.verified_criteria}/{len(self.criteria)})"


@dataclass(frozen=True)
class Product:
    """A product described by a digital product passport."""
    id: str
    name: str = ""
    passport_ids: tuple[str, ...] = ()
    claims: tuple[Claim, ...] = ()

    @property
    def verified_claims(self) -> int:
        return sum(1 for c in self.claims if c.verified)

    def __repr__(self) -> str:
        return f"Product({self.name or self.id}, {self.verified_claims}/{len(self.claims)} claims)"


# ---------------------------------------------------------------------------
# Claims
# ---------------------------------------------------------------------------

def _text(term: Term | None) -> str:
    return "" if term is None else str(term)


def _sorted(terms) -> list[Term]:
    return sorted(set(terms), key=str)


def list_claims(store: FactStore) -> list[Product]:
    """Reconstruct every passport's products, claims and criteria.

    A product described by several passports appears once and lists all
    of them.
    """
    products: list[Product] = []
    product_ids = _sorted(q.object for q in store.match(None, RESULT.hasProduct, None))
    for product in product_ids:
        claims = tuple(
            _resolve_claim(store, product, claim)
            for claim in _sorted(store.objects(product, RESULT.hasConformityClaim))
        )
        products.append(Product(
            id=str(product),
            name=_text(store.value(product, RESULT.productName)),
            passport_ids=tuple(str(t) for t in _sorted(store.objects(product, RESULT.describedBy))),
            claims=claims,
        ))
    return products


def _resolve_claim(store: FactStore, product: Term, claim: Term) -> Claim:
    criteria = tuple(
        _resolve_criterion(store, claim, crit)
        for crit in _sorted(store.objects(claim, RESULT.criterion))
    )

    if criteria:
        verified = all(c.verified for c in criteria)
        derived = bool(store.match(claim, RESULT.allCriteriaVerified, TRUE))
        if derived != verified:
            log.warning(
                "Claim %s: %d/%d criteria verified but all-criteria fact is %s",
                claim, sum(c.verified for c in criteria), len(criteria), derived,
            )
    else:
        verified = bool(store.match(product, RESULT.hasVerifiedClaim, claim))

    return Claim(
        id=str(claim),
        topic=_text(store.value(claim, RESULT.topic)),
        verified=verified,
        criteria=criteria,
        attested_by=tuple(str(t) for t in _sorted(store.objects(claim, RESULT.claimsAttestedBy))),
        explanations=tuple(sorted(str(t) for t in store.objects(claim, RESULT.explanation))),
    )


def _resolve_criterion(store: FactStore, claim: Term, crit: Term) -> Criterion:
    name = _text(store.value(crit, RESULT.criterionName))
    if not store.match(claim, RESULT.verifiedCriterion, crit):
        return Criterion(id=str(crit), name=name)

    a, i = Variable("assessment"), Variable("issuer")
    verifiers = _sorted(
        b[i] for b in match_patterns(store, [
            pattern(a, RESULT.coversClaim, claim),
            pattern(a, RESULT.verifiesCriterion, crit),
            pattern(a, RESULT.verifier, i),
        ])
    )
    if not verifiers:
        log.warning("Criterion %s of claim %s is verified but has no verifier", crit, claim)
        return Criterion(id=str(crit), name=name)

    verifier = verifiers[0]
    return Criterion(
        id=str(crit),
        name=name,
        verified_by=str(verifier),
        verifier_name=_text(store.value(verifier, RESULT.issuerName)),
    )


# ---------------------------------------------------------------------------
# Issuers
# ---------------------------------------------------------------------------

def trust_anchors(store: FactStore) -> set[Term]:
    return set(store.subjects(RDF.type, RESULT.TrustAnchor))


def product_passports(store: FactStore) -> list[str]:
    """Every product passport, including those that name no product."""
    return [str(t) for t in _sorted(store.subjects(RDF.type, RESULT.ProductPassport))]


def self_attested_anchors(store: FactStore) -> list[str]:
    """Identity anchors whose issuer vouches for itself. They attest nothing."""
    return [str(t) for t in _sorted(store.subjects(RESULT.selfAttested, TRUE))]


def dependent_credentials(store: FactStore, passport_id: str | Term) -> list[Term]:
    """The passport plus every conformity credential attesting its claims."""
    passport = _as_term(passport_id)
    credentials = {passport}
    for claim in store.subjects(RESULT.claimedIn, passport):
        credentials.update(store.objects(claim, RESULT.claimsAttestedBy))
    return _sorted(credentials)


def issuer_chain(store: FactStore, issuer: str | Term) -> list[str]:
    """Hops from issuer to a trust anchor, or every issuer reached if none.

    Breadth-first, so the returned path to an anchor is a shortest one.
    """
    start = _as_term(issuer)
    anchors = trust_anchors(store)
    parent: dict[Term, Term | None] = {start: None}
    order: list[Term] = []
    queue = deque([start])
    while queue:
        node = queue.popleft()
        order.append(node)
        if node in anchors:
            path: list[str] = []
            cur: Term | None = node
            while cur is not None:
                path.append(str(cur))
                cur = parent[cur]
            return list(reversed(path))
        for nxt in _sorted(store.objects(node, RESULT.identityAttestedBy)):
            if nxt not in parent:
                parent[nxt] = node
                queue.append(nxt)
    return [str(t) for t in order]


def is_attested(store: FactStore, issuer: str | Term) -> bool:
    """True iff issuer reaches a trust anchor through identity anchors."""
    anchors = trust_anchors(store)
    start = _as_term(issuer)
    visited: set[Term] = set()
    stack = [start]
    while stack:
        node = stack.pop()
        if node in visited:
            continue
        visited.add(node)
        if node in anchors or store.match(node, RESULT.attestedByTrustAnchor):
            return True
        stack.extend(t for t in store.objects(node, RESULT.identityAttestedBy) if t not in visited)
    return False


def unattested_issuers(store: FactStore, passport_id: str | Term) -> list[str]:
    """Issuers the passport depends on that no trust chain vouches for."""
    issuers: set[Term] = set()
    for credential in dependent_credentials(store, passport_id):
        issuers.update(store.objects(credential, RESULT.issuedBy))
    return sorted(str(i) for i in issuers if not is_attested(store, i))


def _as_term(value: str | Term) -> Term:
    # plain strings are IRIs; rdflib terms pass through
    return URIRef(value) if type(value) is str else value
