"""
Scoring engine for banking-regulation documents.

Free text is analysed into domain features: document types, regulatory
topics, banking concepts, weighted keywords, compliance and risk terms,
document references, and a coarse semantic class. The expected and the
retrieved text are compared feature by feature:

    semantic similarity   0.20  (0.4 concepts + 0.4 topics + 0.2 keywords)
    document relevance    0.15  document types
    concept accuracy      0.15
    topic alignment       0.15
    keyword presence      0.10
    regulatory compliance 0.15  compliance + risk terms
    contextual coherence  0.10  1 if semantic classes match, else 0.5

Weights can be overridden and need not sum to 1; the score is clamped.

Usage:
    from fieldsweep.scoring.domain_document import DocumentScorer

    scorer = DocumentScorer()
    result = scorer.score(expected_text, retrieved_text)
    print(result.breakdown["topic_alignment"], result.details["missing_topics"])
"""

import re
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field

from fieldsweep.logging import get_logger
from fieldsweep.scoring.base import ScoreResult, merge_weights, weighted_sum
from fieldsweep.scoring.similarity import set_similarity

logger = get_logger(__name__, component="document_scorer")

DEFAULT_WEIGHTS = {
    "semantic_similarity": 0.20,
    "document_relevance": 0.15,
    "concept_accuracy": 0.15,
    "topic_alignment": 0.15,
    "keyword_presence": 0.10,
    "regulatory_compliance": 0.15,
    "contextual_coherence": 0.10,
}

# ============================================================================
# Vocabularies
# ============================================================================

REGULATORY_TERMS = [
    "supervision", "compliance", "regulation", "guideline", "policy", "framework",
    "oversight", "monitoring", "assessment", "evaluation", "audit", "review",
    "standard", "requirement", "procedure", "process", "control", "governance",
]

RISK_TERMS = [
    "risk", "exposure", "mitigation", "management", "control", "assessment",
    "monitoring", "reporting", "measurement", "analysis", "evaluation", "treatment",
]

COMPLIANCE_TERMS = [
    "adherence", "conformity", "compliance", "violation", "breach", "exception",
    "deviation", "non-compliance", "remediation", "corrective", "preventive",
]

DOCUMENT_TYPES = [
    "regulation", "guideline", "circular", "directive", "notice", "instruction",
    "manual", "handbook", "standard", "procedure", "policy", "framework",
]

BANKING_TERMS = [
    "bank", "banking", "financial", "institution", "credit", "loan", "deposit",
    "capital", "asset", "liability", "equity", "revenue", "income", "profit",
]

PROCEDURAL_TERMS = ["step", "process", "procedure", "method", "approach", "methodology"]

TECHNICAL_TERMS = ["system", "model", "calculation", "formula", "algorithm", "methodology"]

STOP_WORDS = frozenset([
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
    "by", "from", "as", "is", "was", "are", "were", "be", "been", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "may", "might", "can", "shall", "must", "this", "that", "these", "those",
])

# Checked in order; the first vocabulary a word belongs to sets its weight
DOMAIN_WEIGHTS = [
    (frozenset(REGULATORY_TERMS), 3.0),
    (frozenset(RISK_TERMS), 2.5),
    (frozenset(COMPLIANCE_TERMS), 2.5),
    (frozenset(DOCUMENT_TYPES), 2.0),
    (frozenset(BANKING_TERMS), 2.0),
]

MAX_KEYWORDS = 15

TOPIC_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (
    r"\b(capital\s+adequacy|capital\s+requirements?)\b",
    r"\b(liquidity\s+management|liquidity\s+risk)\b",
    r"\b(credit\s+risk|operational\s+risk|market\s+risk)\b",
    r"\b(basel\s+[i\d]+|basel\s+accord)\b",
    r"\b(stress\s+test(?:ing)?|scenario\s+analysis)\b",
    r"\b(anti[\-\s]money\s+laundering|aml)\b",
    r"\b(know\s+your\s+customer|kyc)\b",
    r"\b(corporate\s+governance)\b",
    r"\b(internal\s+controls?)\b",
    r"\b(risk\s+management)\b",
    r"\b(prudential\s+regulation)\b",
    r"\b(financial\s+reporting)\b",
    r"\b(consumer\s+protection)\b",
    r"\b(data\s+protection|privacy)\b",
    r"\b(cybersecurity|information\s+security)\b",
)]

CONCEPT_PATTERNS = [re.compile(p, re.IGNORECASE) for p in (
    r"\b(tier\s+\d+\s+capital|regulatory\s+capital)\b",
    r"\b(risk[\-\s]weighted\s+assets?|rwa)\b",
    r"\b(leverage\s+ratio|capital\s+ratio)\b",
    r"\b(provision(?:ing)?|impairment)\b",
    r"\b(derivative|swap|option|future)\b",
    r"\b(collateral|security|guarantee)\b",
    r"\b(exposure|counterparty|concentration)\b",
    r"\b(valuation|fair\s+value|mark[\-\s]to[\-\s]market)\b",
    r"\b(hedge|hedging|netting)\b",
    r"\b(maturity|duration|tenor)\b",
)]

REFERENCE_PATTERNS = [
    # Document codes such as BRDR-123 or ABC 45-67; case-sensitive on purpose
    re.compile(r"\b[A-Z]{2,5}[\-\s]?\d{1,4}[\-\s]?\d{0,4}\b"),
    re.compile(r"\b(?:section|clause|paragraph|article)\s+\d+(?:\.\d+)*\b", re.IGNORECASE),
    re.compile(r"\b(?:appendix|annex|schedule)\s+[A-Z\d]+\b", re.IGNORECASE),
]

SEMANTIC_CLASSES = ("regulatory", "procedural", "technical", "mixed", "informational")


def _term_pattern(term: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


TERM_PATTERNS = {
    term: _term_pattern(term)
    for term in {
        *REGULATORY_TERMS, *RISK_TERMS, *COMPLIANCE_TERMS,
        *DOCUMENT_TYPES, *PROCEDURAL_TERMS, *TECHNICAL_TERMS,
    }
}


def find_terms(text: str, vocabulary: list[str]) -> list[str]:
    """Vocabulary terms occurring in text as whole words, in vocabulary order."""
    return [term for term in vocabulary if TERM_PATTERNS[term].search(text)]


def find_phrases(text: str, patterns: list[re.Pattern]) -> list[str]:
    """All pattern matches, lower-cased and de-duplicated in match order."""
    phrases = [
        match.group(0).lower().strip()
        for pattern in patterns
        for match in pattern.finditer(text)
    ]
    return list(dict.fromkeys(phrases))


def domain_weight(word: str) -> float:
    for vocabulary, weight in DOMAIN_WEIGHTS:
        if word in vocabulary:
            return weight
    return 1.0


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> list[str]:
    """
    Top keywords by frequency times domain weight.

    Only words of four or more word characters count. Equal scores keep
    the order in which the words first appear.
    """
    words = [w.lower() for w in re.findall(r"\b\w{4,}\b", text)]
    frequency = Counter(w for w in words if w not in STOP_WORDS)

    # Counter preserves first-insertion order; sorted() is stable
    ranked = sorted(
        frequency.items(),
        key=lambda item: item[1] * domain_weight(item[0]),
        reverse=True,
    )
    return [word for word, _ in ranked[:limit]]


def classify_semantic_type(text: str) -> str:
    regulatory = len(find_terms(text, REGULATORY_TERMS))
    procedural = len(find_terms(text, PROCEDURAL_TERMS))
    technical = len(find_terms(text, TECHNICAL_TERMS))

    if regulatory >= 3:
        return "regulatory"
    if procedural >= 2:
        return "procedural"
    if technical >= 2:
        return "technical"
    if regulatory or procedural or technical:
        return "mixed"
    return "informational"


@dataclass
class DocumentAnalysis:
    """Domain features of one text."""
    document_types: list[str] = field(default_factory=list)
    regulatory_topics: list[str] = field(default_factory=list)
    concepts: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    compliance_terms: list[str] = field(default_factory=list)
    risk_factors: list[str] = field(default_factory=list)
    document_references: list[str] = field(default_factory=list)
    semantic_class: str = "informational"

    @property
    def regulatory_terms(self) -> list[str]:
        """Compliance and risk terms together."""
        return [*self.compliance_terms, *self.risk_factors]


class DocumentAnalyzer:
    """Turns free text into a DocumentAnalysis."""

    def analyze(self, text: str) -> DocumentAnalysis:
        references = [
            match.group(0).strip()
            for pattern in REFERENCE_PATTERNS
            for match in pattern.finditer(text)
        ]

        return DocumentAnalysis(
            document_types=find_terms(text, DOCUMENT_TYPES),
            regulatory_topics=find_phrases(text, TOPIC_PATTERNS),
            concepts=find_phrases(text, CONCEPT_PATTERNS),
            keywords=extract_keywords(text),
            compliance_terms=find_terms(text, COMPLIANCE_TERMS),
            risk_factors=find_terms(text, RISK_TERMS),
            document_references=list(dict.fromkeys(references)),
            semantic_class=classify_semantic_type(text),
        )


class DocumentScorer:
    """
    Weighted comparison of two regulation-style documents.

    Example:
        scorer = DocumentScorer(weights={"contextual_coherence": 0.0})
        result = scorer.score(expected_text, retrieved_text)
        result.details["semantic_class_match"]
    """

    name = "domain-document"

    def __init__(self, weights: Mapping[str, float] | None = None):
        self.weights = merge_weights(DEFAULT_WEIGHTS, weights)
        self.analyzer = DocumentAnalyzer()

    def update_weights(self, weights: Mapping[str, float]) -> None:
        """Override some weights, keeping the others."""
        self.weights = merge_weights(self.weights, weights)

    def score(self, expected: str, actual: str) -> ScoreResult:
        expected_analysis = self.analyzer.analyze(expected)
        actual_analysis = self.analyzer.analyze(actual)

        concepts = set_similarity(expected_analysis.concepts, actual_analysis.concepts)
        topics = set_similarity(expected_analysis.regulatory_topics, actual_analysis.regulatory_topics)
        keywords = set_similarity(expected_analysis.keywords, actual_analysis.keywords)
        document_types = set_similarity(
            expected_analysis.document_types, actual_analysis.document_types
        )
        regulatory = set_similarity(
            expected_analysis.regulatory_terms, actual_analysis.regulatory_terms
        )

        class_match = expected_analysis.semantic_class == actual_analysis.semantic_class

        breakdown = {
            "semantic_similarity": concepts.score * 0.4 + topics.score * 0.4 + keywords.score * 0.2,
            "document_relevance": document_types.score,
            "concept_accuracy": concepts.score,
            "topic_alignment": topics.score,
            "keyword_presence": keywords.score,
            "regulatory_compliance": regulatory.score,
            "contextual_coherence": 1.0 if class_match else 0.5,
        }

        # Share of the expected compliance/risk terms the retrieved text repeats
        expected_terms = expected_analysis.regulatory_terms
        actual_terms = set(actual_analysis.regulatory_terms)
        if expected_terms:
            alignment = sum(1 for term in expected_terms if term in actual_terms) / len(expected_terms)
        else:
            alignment = 1.0

        details = {
            "missing_concepts": concepts.missing,
            "extra_concepts": concepts.extra,
            "missing_topics": topics.missing,
            "extra_topics": topics.extra,
            "missing_keywords": keywords.missing,
            "extra_keywords": keywords.extra,
            "expected_class": expected_analysis.semantic_class,
            "actual_class": actual_analysis.semantic_class,
            "semantic_class_match": class_match,
            "regulatory_terms_alignment": alignment,
        }

        overall = weighted_sum(breakdown, self.weights)

        logger.debug(
            "document_scored",
            overall=round(overall, 4),
            class_match=class_match,
        )

        return ScoreResult(overall_score=overall, breakdown=breakdown, details=details)
