"""
In-memory embedding index for one field combination.

Each training row becomes one record: the embedding of the row's
combination fields joined into a single string, tagged with the row's
target value. An index lives only for the evaluation of its combination.

Usage:
    from fieldsweep.vectorstore.index import EmbeddingIndex

    index = EmbeddingIndex.build(training_rows, combination, "sql", embedder)
    print(f"{len(index)} records, dimension {index.dimension}")
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from fieldsweep.combinations import Combination
from fieldsweep.errors import EmptyIndex, ProviderFailure
from fieldsweep.ingestion.rows import Row, is_missing, value_to_text
from fieldsweep.logging import get_logger
from fieldsweep.vectorstore.embeddings import BaseEmbedder

logger = get_logger(__name__, component="index")

FIELD_SEPARATOR = " | "


@dataclass
class EmbeddingRecord:
    """A training row's vector and the target value it points to."""
    vector: np.ndarray
    target_value: str
    # Position of the source row in the rows the index was built from
    row_position: int


def combination_text(row: Row, fields: Sequence[str]) -> str:
    """Join a row's values for the given fields in field order."""
    return FIELD_SEPARATOR.join(value_to_text(row[name]) for name in fields)


class EmbeddingIndex:
    """
    Vectors of one combination's training rows, in insertion order.

    The vectors are also kept stacked in a matrix so the matcher can score
    every record with a single matrix-vector product.
    """

    def __init__(self, combination: Combination, records: list[EmbeddingRecord]):
        self.combination = combination
        self.records = records
        if records:
            self.matrix = np.vstack([record.vector for record in records])
        else:
            self.matrix = np.empty((0, 0))

    def __len__(self) -> int:
        return len(self.records)

    @property
    def dimension(self) -> int:
        return self.matrix.shape[1] if self.records else 0

    @classmethod
    def build(
            cls,
            rows: Sequence[Row],
            combination: Combination,
            target_field: str,
            embedder: BaseEmbedder,
    ) -> "EmbeddingIndex":
        """
        Embed the combination fields of every usable row.

        Rows missing a combination field or the target field are skipped
        with a warning. All surviving texts go to the provider in one
        embed_documents call.

        Args:
            rows: Training rows
            combination: Fields to concatenate per row
            target_field: Field whose value each record carries
            embedder: Embedding provider

        Returns:
            A populated index

        Raises:
            EmptyIndex: If no row survives the skip
            ProviderFailure: If the embedding provider raises or returns unusable vectors
        """
        texts: list[str] = []
        targets: list[str] = []
        positions: list[int] = []
        skipped = 0

        for position, row in enumerate(rows):
            missing = [
                name for name in (*combination.fields, target_field)
                if is_missing(row, name)
            ]
            if missing:
                logger.warning(
                    "row_skipped",
                    combination=combination.name,
                    row=position,
                    missing=missing,
                )
                skipped += 1
                continue

            texts.append(combination_text(row, combination.fields))
            targets.append(value_to_text(row[target_field]))
            positions.append(position)

        if not texts:
            raise EmptyIndex(
                f"No usable training rows for combination '{combination.name}' "
                f"({skipped} skipped)"
            )

        try:
            # Ragged or non-numeric output fails inside asarray
            vectors = np.asarray(embedder.embed_documents(texts), dtype=float)
        except Exception as e:
            raise ProviderFailure(
                f"Embedding provider failed for combination '{combination.name}': {e}"
            ) from e

        if vectors.ndim != 2 or vectors.shape[0] != len(texts):
            raise ProviderFailure(
                f"Embedding provider returned shape {vectors.shape} for {len(texts)} texts"
            )

        records = [
            EmbeddingRecord(vector=vector, target_value=target, row_position=position)
            for vector, target, position in zip(vectors, targets, positions)
        ]

        logger.info(
            "index_built",
            combination=combination.name,
            records=len(records),
            skipped=skipped,
            dimension=vectors.shape[1],
        )

        return cls(combination, records)
