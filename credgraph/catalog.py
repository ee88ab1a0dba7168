"""The inference rule catalog.

Rules are grouped in three stages; each stage reads facts derived by the
stages before it, which is why RULE_ORDER is significant:

  Stage 1: normalize credentials into result:* facts
            (issuers, passports, products, claims, criteria)
  Stage 2: conformity attestation
            (assessments covering claims, verified criteria,
             fully verified claims, directly verified simple claims)
  Stage 3: identity attestation
            (issuer → identity anchor issuer edges, self-attested
             anchors, issuers vouched for by a trust anchor)

The resolver reads only facts in the RESULT namespace; everything it needs
about the raw credential shape goes through these rules.
"""

from __future__ import annotations

from rdflib import RDF, Literal, Variable

from .builtins import Concatenation, EqualTo, for_all_in
from .rules import Annotation, Rule, RuleCatalog
from .types import RESULT, UNTP, VC, pattern

CATALOG_VERSION = "1.0"

TRUE = Literal(True)

# Variables
dpp, dcc, dia = Variable("dpp"), Variable("dcc"), Variable("dia")
cred, subj, att = Variable("cred"), Variable("subj"), Variable("att")
issuer, anchor = Variable("issuer"), Variable("anchor")
product, claim, crit = Variable("product"), Variable("claim"), Variable("criterion")
assessment, topic, name = Variable("assessment"), Variable("topic"), Variable("name")
any_crit, msg = Variable("anyCriterion"), Variable("msg")


# ===========================================================================
# Stage 1: normalization
# ===========================================================================

CREDENTIAL_ISSUERS = Rule(
    id="credential-issuers",
    description="Every credential's issuer",
    antecedent=(pattern(cred, VC.issuer, issuer),),
    consequent=(pattern(cred, RESULT.issuedBy, issuer),),
)

ISSUER_NAMES = Rule(
    id="issuer-names",
    description="Names of credential issuers",
    antecedent=(
        pattern(cred, RESULT.issuedBy, issuer),
        pattern(issuer, UNTP.name, name),
    ),
    consequent=(pattern(issuer, RESULT.issuerName, name),),
)

PRODUCT_PASSPORTS = Rule(
    id="product-passports",
    description="Every digital product passport, with or without products",
    antecedent=(pattern(dpp, RDF.type, UNTP.DigitalProductPassport),),
    consequent=(pattern(dpp, RDF.type, RESULT.ProductPassport),),
)

PASSPORT_PRODUCTS = Rule(
    id="passport-products",
    description="Products described by digital product passports",
    antecedent=(
        pattern(dpp, RDF.type, UNTP.DigitalProductPassport),
        pattern(dpp, VC.credentialSubject, subj),
        pattern(subj, UNTP.product, product),
    ),
    consequent=(
        pattern(dpp, RESULT.hasProduct, product),
        pattern(product, RESULT.describedBy, dpp),
    ),
)

PRODUCT_NAMES = Rule(
    id="product-names",
    antecedent=(
        pattern(dpp, RESULT.hasProduct, product),
        pattern(product, UNTP.name, name),
    ),
    consequent=(pattern(product, RESULT.productName, name),),
)

PRODUCT_CLAIMS = Rule(
    id="product-claims",
    description="Conformity claims a passport makes for its product",
    antecedent=(
        pattern(dpp, RESULT.hasProduct, product),
        pattern(product, UNTP.conformityClaim, claim),
    ),
    consequent=(
        pattern(product, RESULT.hasConformityClaim, claim),
        pattern(claim, RESULT.claimedIn, dpp),
    ),
)

CLAIM_TOPICS = Rule(
    id="claim-topics",
    antecedent=(
        pattern(product, RESULT.hasConformityClaim, claim),
        pattern(claim, UNTP.conformanceTopic, topic),
    ),
    consequent=(pattern(claim, RESULT.topic, topic),),
)

CLAIM_CRITERIA = Rule(
    id="claim-criteria",
    antecedent=(
        pattern(product, RESULT.hasConformityClaim, claim),
        pattern(claim, UNTP.assessmentCriteria, crit),
    ),
    consequent=(pattern(claim, RESULT.criterion, crit),),
)

CRITERION_NAMES = Rule(
    id="criterion-names",
    antecedent=(
        pattern(claim, RESULT.criterion, crit),
        pattern(crit, UNTP.name, name),
    ),
    consequent=(pattern(crit, RESULT.criterionName, name),),
)


# ===========================================================================
# Stage 2: conformity attestation
# ===========================================================================

CONFORMING_ASSESSMENTS = Rule(
    id="conforming-assessments",
    description="Assessments in conformity credentials that found conformance",
    antecedent=(
        pattern(dcc, RDF.type, UNTP.DigitalConformityCredential),
        pattern(dcc, VC.credentialSubject, att),
        pattern(att, UNTP.assessment, assessment),
        pattern(assessment, UNTP.conformance, TRUE),
        pattern(dcc, RESULT.issuedBy, issuer),
    ),
    consequent=(
        pattern(assessment, RESULT.attestedIn, dcc),
        pattern(assessment, RESULT.verifier, issuer),
    ),
)

ASSESSMENT_COVERS_CLAIM = Rule(
    id="assessment-covers-claim",
    description="An assessment of the same product and topic covers the claim",
    antecedent=(
        pattern(assessment, RESULT.attestedIn, dcc),
        pattern(assessment, UNTP.assessedProduct, product),
        pattern(assessment, UNTP.conformanceTopic, topic),
        pattern(product, RESULT.hasConformityClaim, claim),
        pattern(claim, RESULT.topic, topic),
    ),
    consequent=(
        pattern(assessment, RESULT.coversClaim, claim),
        pattern(claim, RESULT.claimsAttestedBy, dcc),
    ),
)

CRITERION_VERIFIED = Rule(
    id="criterion-verified",
    description="A covering assessment lists the claim's criterion",
    antecedent=(
        pattern(assessment, RESULT.coversClaim, claim),
        pattern(assessment, UNTP.assessmentCriteria, crit),
        pattern(claim, RESULT.criterion, crit),
        pattern(assessment, RESULT.verifier, issuer),
    ),
    consequent=(
        pattern(claim, RESULT.verifiedCriterion, crit),
        pattern(assessment, RESULT.verifiesCriterion, crit),
    ),
    annotations=(
        Annotation(
            Concatenation(("Criterion ", crit, " verified by ", issuer), msg),
            (pattern(claim, RESULT.explanation, msg),),
        ),
    ),
)

CLAIM_CRITERIA_VERIFIED = Rule(
    id="claim-criteria-verified",
    description="Every criterion of the claim is verified",
    antecedent=(
        pattern(product, RESULT.hasConformityClaim, claim),
        # at least one criterion: the quantifier below is vacuous otherwise
        pattern(claim, RESULT.criterion, any_crit),
    ),
    builtins=(
        for_all_in(
            [pattern(claim, RESULT.criterion, crit)],
            [pattern(claim, RESULT.verifiedCriterion, crit)],
        ),
    ),
    consequent=(pattern(claim, RESULT.allCriteriaVerified, TRUE),),
    annotations=(
        Annotation(
            Concatenation(("All criteria of claim ", claim, " are verified"), msg),
            (pattern(claim, RESULT.explanation, msg),),
        ),
    ),
)

SIMPLE_CLAIM_VERIFIED = Rule(
    id="simple-claim-verified",
    description="A conforming assessment attests the claim's product and topic",
    antecedent=(
        pattern(product, RESULT.hasConformityClaim, claim),
        pattern(assessment, RESULT.coversClaim, claim),
        pattern(assessment, RESULT.verifier, issuer),
    ),
    consequent=(pattern(product, RESULT.hasVerifiedClaim, claim),),
)


# ===========================================================================
# Stage 3: identity attestation
# ===========================================================================

IDENTITY_ANCHORS = Rule(
    id="identity-anchors",
    description="An identity anchor's issuer vouches for its subject",
    antecedent=(
        pattern(dia, RDF.type, UNTP.DigitalIdentityAnchor),
        pattern(dia, VC.credentialSubject, subj),
        pattern(dia, RESULT.issuedBy, anchor),
    ),
    consequent=(pattern(subj, RESULT.identityAttestedBy, anchor),),
)

SELF_ATTESTED_ANCHORS = Rule(
    id="self-attested-anchors",
    antecedent=(
        pattern(dia, RDF.type, UNTP.DigitalIdentityAnchor),
        pattern(dia, VC.credentialSubject, subj),
        pattern(dia, RESULT.issuedBy, anchor),
    ),
    builtins=(EqualTo(subj, anchor),),
    consequent=(pattern(dia, RESULT.selfAttested, TRUE),),
)

TRUST_ANCHOR_ATTESTATIONS = Rule(
    id="trust-anchor-attestations",
    description="Issuers directly vouched for by a trust anchor",
    antecedent=(
        pattern(subj, RESULT.identityAttestedBy, anchor),
        pattern(anchor, RDF.type, RESULT.TrustAnchor),
    ),
    consequent=(pattern(subj, RESULT.attestedByTrustAnchor, anchor),),
)


RULES = {
    r.id: r
    for r in (
        CREDENTIAL_ISSUERS,
        ISSUER_NAMES,
        PRODUCT_PASSPORTS,
        PASSPORT_PRODUCTS,
        PRODUCT_NAMES,
        PRODUCT_CLAIMS,
        CLAIM_TOPICS,
        CLAIM_CRITERIA,
        CRITERION_NAMES,
        CONFORMING_ASSESSMENTS,
        ASSESSMENT_COVERS_CLAIM,
        CRITERION_VERIFIED,
        CLAIM_CRITERIA_VERIFIED,
        SIMPLE_CLAIM_VERIFIED,
        IDENTITY_ANCHORS,
        SELF_ATTESTED_ANCHORS,
        TRUST_ANCHOR_ATTESTATIONS,
    )
}

RULE_ORDER: tuple[str, ...] = (
    # Stage 1
    "credential-issuers",
    "issuer-names",
    "product-passports",
    "passport-products",
    "product-names",
    "product-claims",
    "claim-topics",
    "claim-criteria",
    "criterion-names",
    # Stage 2
    "conforming-assessments",
    "assessment-covers-claim",
    "criterion-verified",
    "claim-criteria-verified",
    "simple-claim-verified",
    # Stage 3
    "identity-anchors",
    "self-attested-anchors",
    "trust-anchor-attestations",
)

DEFAULT_CATALOG = RuleCatalog.load(RULES, RULE_ORDER, version=CATALOG_VERSION)


def default_catalog() -> RuleCatalog:
    return DEFAULT_CATALOG
