"""
Scoring engines that compare a retrieved answer with the expected one.

This module handles:
- Set similarity shared by every sub-metric
- SQL statement scoring (tables, columns, joins, syntax, keywords)
- Banking-regulation document scoring (topics, concepts, compliance terms)
"""

from fieldsweep.scoring.base import (
    DOMAIN_DOCUMENT,
    STRUCTURED_QUERY,
    ScoreResult,
    ScoringEngine,
    get_scoring_engine,
    resolve_engine_name,
)
from fieldsweep.scoring.domain_document import DocumentAnalysis, DocumentAnalyzer, DocumentScorer
from fieldsweep.scoring.similarity import SetComparison, set_similarity
from fieldsweep.scoring.structured_query import (
    ParsedFailed,
    ParsedOk,
    SQLAnalysis,
    SQLAnalyzer,
    SQLScorer,
)

__all__ = [
    "DOMAIN_DOCUMENT",
    "STRUCTURED_QUERY",
    "ScoreResult",
    "ScoringEngine",
    "get_scoring_engine",
    "resolve_engine_name",
    "DocumentAnalysis",
    "DocumentAnalyzer",
    "DocumentScorer",
    "SetComparison",
    "set_similarity",
    "ParsedFailed",
    "ParsedOk",
    "SQLAnalysis",
    "SQLAnalyzer",
    "SQLScorer",
]
