"""Rule Engine — ordered forward chaining over the fact store.

Each rule of the catalog runs exactly once, in catalog order:

  1. Match the antecedent patterns against the whole current store,
     including facts derived by earlier rules of the same run.
  2. Keep the bindings that pass every built-in.
  3. Instantiate the consequent for every binding; only after all
     bindings are computed are the new quads added to the store.
  4. Evaluate annotations (explanation strings). An annotation that
     cannot be built is skipped and counted; it never blocks step 3.

A run moves IDLE → APPLIED, or IDLE → FAILED when a rule raises. A failed
run keeps the facts derived before the failing rule (no rollback); its
conclusions must not be trusted. Runs are one-shot: after mutating the
store, start a new run. Replaying a run on the same store derives nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from rdflib import Literal, Variable

from .catalog import default_catalog
from .errors import (
    BuiltinError,
    InferenceStateError,
    RuleApplicationError,
    ValidationIssue,
)
from .rules import Rule, RuleCatalog
from .store import FactStore
from .types import DEFAULT_GRAPH, Pattern, Quad
from .unify import Binding, match_patterns, substitute

log = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    APPLIED = "applied"
    FAILED = "failed"


@dataclass
class RuleApplication:
    """What one rule did during a run."""
    rule_id: str
    bindings: int = 0
    derived: int = 0
    skipped_annotations: int = 0
    facts: list[Quad] = field(default_factory=list, repr=False)

    def __repr__(self) -> str:
        return f"RuleApplication({self.rule_id}: {self.bindings} bindings, +{self.derived})"


@dataclass
class InferenceRun:
    """A single application of a catalog to a store."""
    store: FactStore
    catalog: RuleCatalog
    state: RunState = RunState.IDLE
    applications: list[RuleApplication] = field(default_factory=list)
    errors: list[ValidationIssue] = field(default_factory=list)
    failed_rule: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.APPLIED

    @property
    def derived(self) -> int:
        return sum(a.derived for a in self.applications)

    def new_facts(self) -> list[Quad]:
        """Only the quads this run added, in the order they were derived."""
        return [q for a in self.applications for q in a.facts]

    def run(self) -> InferenceRun:
        """Apply every rule once, in catalog order."""
        if self.state != RunState.IDLE:
            raise InferenceStateError(
                f"Inference run already {self.state.value}; start a new run"
            )

        before = len(self.store)
        for rule in self.catalog:
            try:
                application = apply_rule(rule, self.store)
            except RuleApplicationError as e:
                log.error("Inference stopped at rule %s: %s", rule.id, e)
                self.errors.append(ValidationIssue.from_error(e, source=rule.id))
                self.failed_rule = rule.id
                self.state = RunState.FAILED
                return self
            self.applications.append(application)
            log.debug("%r", application)

        self.state = RunState.APPLIED
        log.info(
            "Applied %d rules: %d new facts (%d → %d quads)",
            len(self.applications), len(self.store) - before, before, len(self.store),
        )
        return self

    def summary(self) -> str:
        lines = []
        lines.append(f"Inference: {self.state.value.upper()}")
        lines.append("-" * 50)
        for a in self.applications:
            lines.append(f"  {a.rule_id}: +{a.derived} facts ({a.bindings} bindings)")
            if a.skipped_annotations:
                lines.append(f"     - {a.skipped_annotations} explanation(s) skipped")
        for e in self.errors:
            lines.append(f"  ! {e!r}")
        return "\n".join(lines)


class RuleEngine:
    """Applies a rule catalog to fact stores."""

    def __init__(self, catalog: RuleCatalog | None = None) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()

    def run(self, store: FactStore) -> InferenceRun:
        return InferenceRun(store=store, catalog=self.catalog).run()


def run_inferences(store: FactStore, catalog: RuleCatalog | None = None) -> InferenceRun:
    """Run every catalog rule once over store, adding only new facts."""
    return RuleEngine(catalog).run(store)


# ---------------------------------------------------------------------------
# Single rule
# ---------------------------------------------------------------------------

def apply_rule(rule: Rule, store: FactStore) -> RuleApplication:
    """Apply one rule to the store. Raises RuleApplicationError on failure."""
    application = RuleApplication(rule_id=rule.id)
    try:
        bindings = _antecedent_bindings(rule, store)
        derived = [
            q for b in bindings for q in _instantiate(rule.id, rule.consequent, b)
        ]
    except RuleApplicationError:
        raise
    except (BuiltinError, TypeError, ValueError) as e:
        raise RuleApplicationError(rule.id, str(e)) from e
    except (MemoryError, RecursionError) as e:
        raise RuleApplicationError(rule.id, f"resource exhausted: {type(e).__name__}") from e

    application.bindings = len(bindings)
    application.facts = store.add(derived)

    if rule.annotations:
        notes: list[Quad] = []
        for b in bindings:
            for ann in rule.annotations:
                try:
                    for extended in ann.concatenation.evaluate(store, b):
                        notes.extend(_instantiate(rule.id, ann.consequent, extended))
                except (BuiltinError, RuleApplicationError) as e:
                    application.skipped_annotations += 1
                    log.debug("Rule %s: explanation skipped: %s", rule.id, e)
        application.facts.extend(store.add(notes))

    application.derived = len(application.facts)
    return application


def _antecedent_bindings(rule: Rule, store: FactStore) -> list[Binding]:
    bindings = match_patterns(store, rule.antecedent)
    for builtin in rule.builtins:
        bindings = [r for b in bindings for r in builtin.evaluate(store, b)]
    return bindings


def _instantiate(rule_id: str, patterns: tuple[Pattern, ...], binding: Binding) -> list[Quad]:
    quads = []
    for pat in patterns:
        s, p, o, _ = substitute(pat, binding)
        unbound = [t for t in (s, p, o) if isinstance(t, Variable)]
        if unbound:
            raise RuleApplicationError(
                rule_id, f"consequent {pat!r} has unbound variable {unbound[0].n3()}"
            )
        if isinstance(s, Literal):
            # a literal reached subject position; not representable as a fact
            log.debug("Rule %s: skipping %r with literal subject %s", rule_id, pat, s)
            continue
        try:
            quads.append(Quad(s, p, o, DEFAULT_GRAPH))
        except TypeError as e:
            raise RuleApplicationError(rule_id, f"cannot instantiate {pat!r}: {e}") from e
    return quads
