"""
fieldsweep - find the field combination that makes retrieval work best.

This package embeds every non-empty subset of a table's candidate fields,
retrieves the nearest training row for each held-out query, and scores the
retrieved answer against the expected one.
"""

__version__ = "0.1.0"
