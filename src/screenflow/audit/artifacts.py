"""File names of the audit artifacts, shared by reports and writers."""

SCREENED_DATA = "screened_data.csv"
SCREENING_RULES = "screening_rules.csv"
SCREENING_LOG = "screening_log.csv"
SCREENING_OVERLAP = "screening_overlap.csv"
CONSORT_FLOW = "consort_flow.csv"
CONSORT_BY_REASON = "consort_by_reason.csv"
SCREENING_SUMMARY = "screening_summary.csv"
WARNINGS = "warnings.csv"
DECISION_REGISTRY = "decision_registry.csv"
RAW_CODEBOOK = "raw_codebook.csv"
MANIFEST = "audit_manifest.json"
