"""EV Battery — end-to-end trust graph demonstration.

Three scenarios over the same product passport:

  A. Partial attestation: BatteryPackaging is not attested, so the
     emissions claim stays unverified (1/2) and the waste claim is
     verified (2/2).
  B. Full attestation: the conformity credential also attests
     BatteryPackaging; both claims are verified.
  C. No identity anchors: claims are unchanged but no issuer can be
     traced to the trust anchor.

Run with:  python -m case_studies.ev_battery.run
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from credgraph.config import Settings, configure_logging
from credgraph.resolver import issuer_chain
from credgraph.validation import validate_graph

from .credentials import (
    BATTERY_MAKER,
    CERTIFIER,
    TRUST_ANCHORS,
    build_documents,
)


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def run_scenario(title: str, documents: dict, note: str = "") -> None:
    print_header(title)
    report = validate_graph(
        documents,
        trust_anchors=TRUST_ANCHORS,
        settings=Settings(),
    )
    print()
    print(report.summary())

    if report.inference is not None:
        print()
        for issuer in (BATTERY_MAKER, CERTIFIER):
            chain = issuer_chain(report.store, issuer)
            print(f"  Chain for {issuer}:")
            print(f"    {' → '.join(chain)}")

    if note:
        print(f"\n  NOTE: {note}")


def main():
    configure_logging()
    print("=" * 60)
    print("  Credential Trust Graph — EV battery 300Ah")
    print("=" * 60)

    run_scenario(
        "Scenario A: BatteryPackaging not attested",
        build_documents(include_packaging=False),
        note="Every criterion of a claim must be attested. One of two\n"
             "  emissions criteria is attested, so that claim is unverified.",
    )

    run_scenario(
        "Scenario B: all criteria attested",
        build_documents(include_packaging=True),
    )

    run_scenario(
        "Scenario C: no identity anchors",
        build_documents(include_packaging=True, with_anchors=False),
        note="Claims are verified, but neither the maker nor the certifier\n"
             "  can be traced to the national registry.",
    )


if __name__ == "__main__":
    main()
