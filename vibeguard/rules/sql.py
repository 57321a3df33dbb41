"""Destructive and injectable SQL rules."""

import re

from . import fixes
from .base import Category, EffortLevel, ImpactLevel, Rule, Severity, TransformFix
from .languages import SQL_HOSTS

_FLAGS = re.IGNORECASE | re.MULTILINE

# Statement end: semicolon, closing host-language quote, or end of line not
# followed by a WHERE on the next line
_STATEMENT_END = r"""(?:;|(?=["'`])|$(?!\s*WHERE\b))"""

_TABLE = r"\w+(?:\.\w+)?"
_SCRATCH_TABLE = r"(?:test|temp|tmp|example|dummy)\w*"


def rules() -> list[Rule]:
    return [
        Rule(
            id="SQL_DELETE_NO_WHERE",
            category=Category.DESTRUCTIVE_SQL,
            severity=Severity.ERROR,
            pattern=rf"\bDELETE\s+FROM\s+{_TABLE}[ \t]*{_STATEMENT_END}",
            flags=_FLAGS,
            message="DELETE without WHERE removes every row of the table: {match}",
            description="Unconditioned DELETE statements wipe whole tables when run by mistake.",
            quick_fix=TransformFix(fixes.append_where_clause, title="Add a WHERE clause"),
            whitelist=(rf"DELETE\s+FROM\s+{_SCRATCH_TABLE}",),
            tags=("data-loss",),
        ),
        Rule(
            id="SQL_UPDATE_NO_WHERE",
            category=Category.DESTRUCTIVE_SQL,
            severity=Severity.ERROR,
            pattern=(
                rf"\bUPDATE\s+{_TABLE}\s+SET\s+(?:(?!\bWHERE\b)[^;\n])+"
                r"(?:;|$(?!\s*WHERE\b))"
            ),
            flags=_FLAGS,
            message="UPDATE without WHERE rewrites every row of the table.",
            description="Unconditioned UPDATE statements overwrite all records in one go.",
            quick_fix=TransformFix(fixes.append_where_clause, title="Add a WHERE clause"),
            whitelist=(rf"UPDATE\s+{_SCRATCH_TABLE}\s+SET",),
            tags=("data-loss",),
        ),
        Rule(
            id="SQL_DROP_TABLE",
            category=Category.DESTRUCTIVE_SQL,
            severity=Severity.ERROR,
            pattern=rf"\bDROP\s+TABLE\s+(?:IF\s+EXISTS\s+)?{_TABLE}",
            flags=_FLAGS,
            message="DROP TABLE permanently deletes the table and all of its data: {match}",
            description="Dropped tables cannot be recovered without a backup.",
            quick_fix=TransformFix(fixes.comment_out_drop, title="Comment out and add a backup reminder"),
            whitelist=(
                rf"DROP\s+TABLE\s+(?:IF\s+EXISTS\s+)?{_SCRATCH_TABLE}",
                r"DROP\s+TABLE\s+(?:IF\s+EXISTS\s+)?\w*_(?:temp|tmp|backup|old)\b",
            ),
            effort=EffortLevel.MEDIUM,
            tags=("data-loss",),
        ),
        Rule(
            id="SQL_DROP_DATABASE",
            category=Category.DESTRUCTIVE_SQL,
            severity=Severity.ERROR,
            pattern=rf"\bDROP\s+(?:DATABASE|SCHEMA)\s+(?:IF\s+EXISTS\s+)?{_TABLE}",
            flags=_FLAGS,
            message="DROP DATABASE deletes every table, row and grant in it: {match}",
            description="A dropped database takes all of its objects with it.",
            quick_fix=TransformFix(fixes.comment_out_drop, title="Comment out and add a backup reminder"),
            whitelist=(rf"DROP\s+(?:DATABASE|SCHEMA)\s+(?:IF\s+EXISTS\s+)?{_SCRATCH_TABLE}",),
            effort=EffortLevel.MEDIUM,
            tags=("data-loss",),
        ),
        Rule(
            id="SQL_TRUNCATE_TABLE",
            category=Category.DESTRUCTIVE_SQL,
            severity=Severity.ERROR,
            pattern=(
                rf"\bTRUNCATE\s+(?:TABLE\s+{_TABLE}|{_TABLE}[ \t]*(?=;|[\"'`]|$))"
            ),
            flags=_FLAGS,
            message="TRUNCATE deletes all rows and cannot be rolled back in most databases.",
            description="TRUNCATE bypasses row-level logging; prefer a transactional DELETE.",
            quick_fix=TransformFix(fixes.truncate_to_delete, title="Use DELETE instead"),
            whitelist=(rf"TRUNCATE\s+(?:TABLE\s+)?{_SCRATCH_TABLE}",),
            tags=("data-loss",),
        ),
        Rule(
            id="SQL_INJECTION_CONCAT",
            category=Category.DESTRUCTIVE_SQL,
            severity=Severity.WARNING,
            pattern=(
                r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b[^\n]*?\+[^\n]*?"
                r"(?:input|param|request|req\.|user|form|query|body)"
            ),
            flags=_FLAGS,
            message="SQL built by string concatenation with user input. Use a parameterized query.",
            description="Concatenating request data into SQL lets attackers rewrite the query.",
            whitelist=(r"console\.\w+\s*\(", r"\bprint\s*\(", r"\becho\b", r"\blog(?:ger)?\.\w+\s*\("),
            languages=SQL_HOSTS,
            impact=ImpactLevel.HIGH,
            effort=EffortLevel.MEDIUM,
            confidence=0.7,
            tags=("injection",),
        ),
    ]
