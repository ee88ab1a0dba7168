"""EV Battery — example credential set.

One product, three kinds of credentials:

- Digital Product Passport for "EV battery 300Ah", issued by the maker,
  with two conformity claims:
    environment.emissions — criteria BatteryAssembly, BatteryPackaging
    environment.waste     — criteria BatteryDisposal, BatteryRecycling
- Digital Conformity Credential from a certification body attesting
  BatteryAssembly, BatteryDisposal and BatteryRecycling (not BatteryPackaging)
- Digital Identity Anchors:
    national registry     → battery maker
    accreditation service → certification body
    national registry     → accreditation service

With the national registry as the only trust anchor, every issuer is
attested (the certifier through two hops), the waste claim is verified and
the emissions claim is not.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

import copy

from credgraph.types import UNTP, VC


CONTEXT = {
    "@vocab": str(UNTP),
    "id": "@id",
    "type": "@type",
    "VerifiableCredential": str(VC.VerifiableCredential),
    "issuer": {"@id": str(VC.issuer), "@type": "@id"},
    "credentialSubject": {"@id": str(VC.credentialSubject), "@type": "@id"},
}

# Issuers
BATTERY_MAKER = "did:web:battery-maker.example.com"
CERTIFIER = "did:web:green-cert.example.org"
ACCREDITATION = "did:web:accreditation.example.org"
REGISTRY = "did:web:business-registry.example.gov"

TRUST_ANCHORS = [REGISTRY]

# Credentials
PASSPORT_ID = "https://battery-maker.example.com/credentials/dpp-300ah"
CONFORMITY_ID = "https://green-cert.example.org/credentials/dcc-300ah"

PRODUCT_ID = "https://id.battery-maker.example.com/products/ev-battery-300ah"
EMISSIONS_CLAIM = "https://battery-maker.example.com/claims/300ah-emissions"
WASTE_CLAIM = "https://battery-maker.example.com/claims/300ah-waste"

_CRITERIA = "https://vocabulary.example.org/criteria/"
BATTERY_ASSEMBLY = _CRITERIA + "BatteryAssembly"
BATTERY_PACKAGING = _CRITERIA + "BatteryPackaging"
BATTERY_DISPOSAL = _CRITERIA + "BatteryDisposal"
BATTERY_RECYCLING = _CRITERIA + "BatteryRecycling"


def _issuer(did: str, name: str) -> dict:
    return {"id": did, "type": ["CredentialIssuer"], "name": name}


def _criterion(iri: str) -> dict:
    return {"id": iri, "type": ["Criterion"], "name": iri.rsplit("/", 1)[-1]}


def build_passport() -> dict:
    """The maker's Digital Product Passport."""
    return {
        "@context": CONTEXT,
        "id": PASSPORT_ID,
        "type": ["DigitalProductPassport", "VerifiableCredential"],
        "issuer": _issuer(BATTERY_MAKER, "Acme Battery Co"),
        "credentialSubject": {
            "type": ["ProductPassport"],
            "product": {
                "id": PRODUCT_ID,
                "type": ["Product"],
                "name": "EV battery 300Ah",
                "conformityClaim": [
                    {
                        "id": EMISSIONS_CLAIM,
                        "type": ["Claim"],
                        "conformanceTopic": "environment.emissions",
                        "assessmentCriteria": [
                            _criterion(BATTERY_ASSEMBLY),
                            _criterion(BATTERY_PACKAGING),
                        ],
                    },
                    {
                        "id": WASTE_CLAIM,
                        "type": ["Claim"],
                        "conformanceTopic": "environment.waste",
                        "assessmentCriteria": [
                            _criterion(BATTERY_DISPOSAL),
                            _criterion(BATTERY_RECYCLING),
                        ],
                    },
                ],
            },
        },
    }


def _assessment(topic: str, criteria: list[str], conformance: bool = True) -> dict:
    return {
        "type": ["ConformityAssessment"],
        "assessedProduct": {"id": PRODUCT_ID},
        "conformanceTopic": topic,
        "assessmentCriteria": [{"id": c} for c in criteria],
        "conformance": conformance,
    }


def build_conformity_credential(include_packaging: bool = False) -> dict:
    """The certification body's Digital Conformity Credential.

    include_packaging=True also attests BatteryPackaging, which makes the
    emissions claim fully verified.
    """
    emissions = [BATTERY_ASSEMBLY] + ([BATTERY_PACKAGING] if include_packaging else [])
    return {
        "@context": CONTEXT,
        "id": CONFORMITY_ID,
        "type": ["DigitalConformityCredential", "VerifiableCredential"],
        "issuer": _issuer(CERTIFIER, "Green Certification Body"),
        "credentialSubject": {
            "type": ["ConformityAttestation"],
            "assessment": [
                _assessment("environment.emissions", emissions),
                _assessment("environment.waste", [BATTERY_DISPOSAL, BATTERY_RECYCLING]),
            ],
        },
    }


def build_identity_anchor(anchor_id: str, issuer: tuple[str, str], subject: str) -> dict:
    """A Digital Identity Anchor: issuer vouches for subject's identity."""
    return {
        "@context": CONTEXT,
        "id": anchor_id,
        "type": ["DigitalIdentityAnchor", "VerifiableCredential"],
        "issuer": _issuer(*issuer),
        "credentialSubject": {"id": subject, "type": ["RegisteredIdentity"]},
    }


def build_identity_anchors() -> dict[str, dict]:
    return {
        "dia-battery-maker.json": build_identity_anchor(
            "https://business-registry.example.gov/dia/battery-maker",
            (REGISTRY, "National Business Registry"),
            BATTERY_MAKER,
        ),
        "dia-certifier.json": build_identity_anchor(
            "https://accreditation.example.org/dia/green-cert",
            (ACCREDITATION, "Accreditation Service"),
            CERTIFIER,
        ),
        "dia-accreditation.json": build_identity_anchor(
            "https://business-registry.example.gov/dia/accreditation",
            (REGISTRY, "National Business Registry"),
            ACCREDITATION,
        ),
    }


def build_documents(include_packaging: bool = False, with_anchors: bool = True) -> dict[str, dict]:
    """The full credential set, keyed by file name."""
    documents = {
        "dpp-300ah.json": build_passport(),
        "dcc-300ah.json": build_conformity_credential(include_packaging),
    }
    if with_anchors:
        documents.update(build_identity_anchors())
    return copy.deepcopy(documents)
