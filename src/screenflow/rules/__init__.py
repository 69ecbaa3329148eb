"""Rule compilation: configuration to an ordered rule table."""
from __future__ import annotations

from screenflow.rules.compiler import compile_rules
from screenflow.rules.table import RULE_COLUMNS, RuleTable

__all__ = ["RULE_COLUMNS", "RuleTable", "compile_rules"]
