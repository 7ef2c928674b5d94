"""
Scoring engine for SQL statements.

The expected and the retrieved statement are each analysed into the tables,
columns and joins they reference, the SQL keywords they use, and whether
they parse. The analyses are compared criterion by criterion with
set_similarity and combined with weights:

    tables 0.25, columns 0.25, joins 0.20, syntax 0.15,
    keywords 0.10, differences 0.05

Parsing uses sqlglot. A statement sqlglot rejects is still analysed with
regular expressions so it can score partially; it just gets syntax 0.

Usage:
    from fieldsweep.scoring.structured_query import SQLScorer

    scorer = SQLScorer()
    result = scorer.score("SELECT id FROM users", "SELECT id, name FROM users")
    print(result.overall_score, result.details["extra_columns"])
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from fieldsweep.logging import get_logger
from fieldsweep.scoring.base import ScoreResult, merge_weights, weighted_sum
from fieldsweep.scoring.similarity import set_similarity

logger = get_logger(__name__, component="sql_scorer")

DEFAULT_WEIGHTS = {
    "tables": 0.25,
    "columns": 0.25,
    "joins": 0.20,
    "syntax": 0.15,
    "keywords": 0.10,
    "differences": 0.05,
}

# Each missing or extra term costs this much of the differences sub-score
DIFFERENCE_PENALTY = 0.1

SQL_KEYWORDS = [
    "select", "from", "where", "join", "inner", "left", "right", "full", "cross",
    "on", "group", "by", "having", "order", "limit", "offset", "union", "except",
    "intersect", "insert", "update", "delete", "create", "drop", "alter", "index",
    "view", "distinct", "count", "sum", "avg", "min", "max", "case", "when", "then",
    "else", "end", "and", "or", "not", "in", "exists", "like", "between", "is", "null",
]

KEYWORD_PATTERNS = [(keyword, re.compile(rf"\b{keyword}\b")) for keyword in SQL_KEYWORDS]

JOIN_SIDES = ("inner", "left", "right", "full", "cross")

IDENTIFIER = r"([a-z_][a-z0-9_]*)"
TABLE_PATTERNS = [
    re.compile(rf"\bfrom\s+{IDENTIFIER}"),
    re.compile(rf"\bjoin\s+{IDENTIFIER}"),
    re.compile(rf"\bupdate\s+{IDENTIFIER}"),
    re.compile(rf"\binto\s+{IDENTIFIER}"),
]
SIDED_JOIN_PATTERN = re.compile(r"\b(inner|left|right|full|cross)(?:\s+outer)?\s+join\b")
JOIN_PATTERN = re.compile(r"\bjoin\b")
SELECT_LIST_PATTERN = re.compile(r"\bselect\s+(.*?)\s+from\b")


def _statement_types() -> tuple[type, ...]:
    # Alter was AlterTable in older sqlglot releases
    names = (
        "Select", "Union", "Except", "Intersect", "Subquery",
        "Insert", "Update", "Delete", "Create", "Drop", "Alter", "AlterTable",
    )
    return tuple(getattr(exp, name) for name in names if hasattr(exp, name))


STATEMENT_TYPES = _statement_types()


# ============================================================================
# Parsing
# ============================================================================

@dataclass
class ParsedOk:
    """A statement sqlglot accepted, with what it references."""
    tables: list[str]
    columns: list[str]
    joins: list[str]


@dataclass
class ParsedFailed:
    """A statement sqlglot rejected."""
    reason: str


ParseOutcome = ParsedOk | ParsedFailed


def normalize_sql(query: str) -> str:
    """Collapse whitespace, drop a trailing semicolon and lower-case."""
    query = re.sub(r"\s+", " ", query).strip()
    query = re.sub(r";$", "", query).strip()
    return query.lower()


def _unique(items) -> list[str]:
    return list(dict.fromkeys(item for item in items if item))


def _join_labels(side: str) -> list[str]:
    """Join vocabulary shared by the parser and the regex fallback."""
    side = side.lower()
    if side in JOIN_SIDES:
        return [f"{side} join", "join"]
    return ["join"]


def parse_statement(query: str) -> ParseOutcome:
    """
    Parse a normalised statement with sqlglot.

    Anything that parses but is not a statement (a bare expression such as
    "hello world") counts as a failure.
    """
    try:
        tree = sqlglot.parse_one(query)
    except SqlglotError as e:
        return ParsedFailed(reason=str(e).splitlines()[0] if str(e) else type(e).__name__)

    if tree is None or not isinstance(tree, STATEMENT_TYPES):
        kind = type(tree).__name__ if tree is not None else "nothing"
        return ParsedFailed(reason=f"Not a SQL statement (parsed as {kind})")

    tables = _unique(table.name.lower() for table in tree.find_all(exp.Table))
    columns = _unique(
        column.name.lower()
        for column in tree.find_all(exp.Column)
        if column.name != "*"
    )

    joins: list[str] = []
    for join in tree.find_all(exp.Join):
        if not (join.side or join.kind or join.args.get("on") or join.args.get("using")):
            # Comma join (FROM a, b): no JOIN keyword in the text
            continue
        # sqlglot keeps INNER/CROSS in kind and LEFT/RIGHT/FULL in side
        side = join.side or join.kind
        joins.extend(_join_labels(side))

    return ParsedOk(tables=tables, columns=columns, joins=_unique(joins))


# ============================================================================
# Analysis
# ============================================================================

@dataclass
class SQLAnalysis:
    """What one SQL statement references."""
    tables: list[str] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    joins: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    is_valid: bool = False
    syntax_errors: list[str] = field(default_factory=list)


def extract_keywords(query: str) -> list[str]:
    """SQL keywords occurring as whole words, in keyword-list order."""
    return [keyword for keyword, pattern in KEYWORD_PATTERNS if pattern.search(query)]


def extract_with_regex(query: str) -> ParsedOk:
    """Best-effort extraction for statements the parser rejected."""
    tables = _unique(
        match.group(1)
        for pattern in TABLE_PATTERNS
        for match in pattern.finditer(query)
    )

    joins: list[str] = []
    for match in SIDED_JOIN_PATTERN.finditer(query):
        joins.extend(_join_labels(match.group(1)))
    if JOIN_PATTERN.search(query):
        joins.append("join")

    columns: list[str] = []
    select_match = SELECT_LIST_PATTERN.search(query)
    if select_match:
        for column in select_match.group(1).split(","):
            column = column.strip()
            column = re.sub(r"^distinct\s+", "", column)
            column = re.sub(r".*\.", "", column)
            column = re.sub(r"\s+as\s+.*", "", column)
            if column and column != "*":
                columns.append(column)

    return ParsedOk(tables=tables, columns=_unique(columns), joins=_unique(joins))


class SQLAnalyzer:
    """Turns a SQL string into an SQLAnalysis."""

    def analyze(self, query: str) -> SQLAnalysis:
        clean = normalize_sql(query)
        outcome = parse_statement(clean)

        if isinstance(outcome, ParsedOk):
            references = outcome
            errors: list[str] = []
        else:
            references = extract_with_regex(clean)
            errors = [outcome.reason]

        return SQLAnalysis(
            tables=references.tables,
            columns=references.columns,
            joins=references.joins,
            keywords=extract_keywords(clean),
            is_valid=isinstance(outcome, ParsedOk),
            syntax_errors=errors,
        )


# ============================================================================
# Scoring
# ============================================================================

class SQLScorer:
    """
    Weighted comparison of two SQL statements.

    Example:
        scorer = SQLScorer(weights={"syntax": 0.3})
        result = scorer.score(expected_sql, retrieved_sql)
        result.breakdown["tables"]   # Jaccard of referenced tables
        result.details["missing_tables"]
    """

    name = "structured-query"

    def __init__(self, weights: Mapping[str, float] | None = None):
        self.weights = merge_weights(DEFAULT_WEIGHTS, weights)
        self.analyzer = SQLAnalyzer()

    def update_weights(self, weights: Mapping[str, float]) -> None:
        """Override some weights, keeping the others."""
        self.weights = merge_weights(self.weights, weights)

    def score(self, expected: str, actual: str) -> ScoreResult:
        expected_analysis = self.analyzer.analyze(expected)
        actual_analysis = self.analyzer.analyze(actual)

        comparisons = {
            name: set_similarity(getattr(expected_analysis, name), getattr(actual_analysis, name))
            for name in ("tables", "columns", "joins", "keywords")
        }

        total_differences = sum(c.difference_count for c in comparisons.values())

        breakdown = {
            "tables": comparisons["tables"].score,
            "columns": comparisons["columns"].score,
            "joins": comparisons["joins"].score,
            "syntax": 1.0 if actual_analysis.is_valid else 0.0,
            "keywords": comparisons["keywords"].score,
            "differences": max(0.0, 1 - total_differences * DIFFERENCE_PENALTY),
        }

        details: dict = {}
        for name, comparison in comparisons.items():
            details[f"missing_{name}"] = comparison.missing
            details[f"extra_{name}"] = comparison.extra
        details["expected_valid"] = expected_analysis.is_valid
        details["actual_valid"] = actual_analysis.is_valid
        details["syntax_errors"] = actual_analysis.syntax_errors

        overall = weighted_sum(breakdown, self.weights)

        logger.debug(
            "sql_scored",
            overall=round(overall, 4),
            differences=total_differences,
            actual_valid=actual_analysis.is_valid,
        )

        return ScoreResult(overall_score=overall, breakdown=breakdown, details=details)
