"""credgraph — trust-graph validation of UNTP credentials.

Validates product passports, conformity credentials and identity anchors
not one by one but as a graph: for every claim a product makes, has an
independent party attested each of its criteria, and are the issuers of
the supporting credentials vouched for through identity anchors?

The package is layered:

  Fact Store       (store)     — append-only set of quads
  Pattern Matcher  (unify)     — conjunctive queries with variable bindings
  Built-ins        (builtins)  — equalTo, concatenation, forAllIn
  Rule Engine      (engine)    — ordered forward chaining over the catalog
  Rule Catalog     (catalog)   — the fixed inference pipeline
  Resolver         (resolver)  — products/claims/criteria and issuer trust

  Ingest           (ingest)    — JSON-LD credentials to quads (rdflib)
  Snapshot         (snapshot)  — N-Quads export/import
  Validation       (validation)— ingest → infer → resolve, with a report
"""
