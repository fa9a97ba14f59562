"""Question extraction: raw table rows to typed question records"""

import logging
import math
from decimal import Decimal
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .column_resolver import ColumnResolver
from .text_cleaner import TextCleaner
from .types import CoercionWarning, ColumnMapping, QuestionRecord, RawRow

logger = logging.getLogger(__name__)


def coerce_cell(value: Any) -> Tuple[str, Optional[str]]:
    """
    Convert one cell to text.

    Returns:
        Tuple of (text, reason); reason is set when the cell could not be
        read and the text was left empty.
    """
    if value is None:
        return "", None

    # Dates and durations; .item() would turn ns values into a bare int
    if isinstance(value, (np.datetime64, np.timedelta64)):
        if np.isnat(value):
            return "", None
        return "", f"unsupported cell type {type(value).__name__}"

    # numpy scalars as produced by pandas
    if isinstance(value, np.generic):
        value = value.item()

    if isinstance(value, str):
        return value, None
    if isinstance(value, bool):
        return str(value).lower(), None
    if isinstance(value, int):
        return str(value), None
    if isinstance(value, Decimal):
        if value.is_nan():
            return "", None
        if not value.is_finite():
            return "", "non-finite number"
        if value == value.to_integral_value():
            return str(int(value)), None
        return str(value), None
    if isinstance(value, float):
        if math.isnan(value):
            return "", None  # empty spreadsheet cell
        if not math.isfinite(value):
            return "", "non-finite number"
        if value == int(value):
            return str(int(value)), None
        return str(value), None

    # pandas.NaT and friends compare unequal to themselves
    try:
        if value != value:
            return "", None
    except (TypeError, ValueError):
        pass

    return "", f"unsupported cell type {type(value).__name__}"


class QuestionExtractor:
    """Handles question extraction from table rows"""

    def __init__(self):
        self.column_resolver = ColumnResolver()
        self.text_cleaner = TextCleaner()

    def ingest(self, rows: Sequence[RawRow], columns: Optional[Sequence[str]] = None) -> List[QuestionRecord]:
        """
        Map raw rows to question records, one per row, in input order.

        Column labels come from ``columns`` when given, otherwise from the
        first row.

        Raises:
            SchemaError: if the question column cannot be resolved
        """
        rows = list(rows)
        if columns is None:
            columns = list(rows[0].keys()) if rows else []
        mapping = self.column_resolver.resolve(columns)
        return self.extract_records(rows, mapping)

    def extract_records(self, rows: Sequence[RawRow], mapping: ColumnMapping) -> List[QuestionRecord]:
        """One record per row, in input order, for an already resolved mapping"""
        records = [
            self.extract_record(row, index, mapping)
            for index, row in enumerate(rows)
        ]

        warning_count = sum(len(record.coercion_warnings) for record in records)
        if warning_count > 0:
            logger.warning(f"{warning_count} cell(s) could not be read and were left empty")
        logger.info(f"Ingested {len(records)} question records")
        return records

    def extract_record(self, row: RawRow, index: int, mapping: ColumnMapping) -> QuestionRecord:
        """Build the record for a single row"""
        warnings: List[CoercionWarning] = []

        def read(column: Optional[str], field: str) -> str:
            if column is None:
                return ""
            value = row.get(column)
            text, reason = coerce_cell(value)
            if reason:
                logger.debug(f"Row {index}, column '{column}': {reason}")
                warnings.append(
                    CoercionWarning(index, column, field, type(value).__name__, reason)
                )
            return text

        question_text = read(mapping.question, "question_text")
        theme = read(mapping.theme, "theme")
        level = read(mapping.level, "level")
        answer_format = read(mapping.answer_format, "answer_format")
        external_id = read(mapping.external_id, "external_id")
        explanation = read(mapping.explanation, "explanation")
        choices = [read(column, "choices") for column in mapping.choices]

        return QuestionRecord(
            question_text=question_text,
            source_row_index=index,
            theme=theme,
            level=level,
            answer_format=answer_format,
            external_id=external_id,
            choices=choices,
            explanation=explanation,
            coercion_warnings=warnings,
        )

    def changed_questions(self, records: Sequence[QuestionRecord]) -> Iterator[Tuple[QuestionRecord, str]]:
        """Records whose text the normalizer would rewrite, with the cleaned text"""
        for record in records:
            cleaned = self.text_cleaner.normalize(record.question_text)
            if cleaned != record.question_text:
                yield record, cleaned


def ingest(rows: Sequence[RawRow], columns: Optional[Sequence[str]] = None) -> List[QuestionRecord]:
    """Module-level shortcut for QuestionExtractor().ingest"""
    return QuestionExtractor().ingest(rows, columns)


def changed_questions(records: Sequence[QuestionRecord]) -> Iterator[Tuple[QuestionRecord, str]]:
    """Module-level shortcut for QuestionExtractor().changed_questions"""
    return QuestionExtractor().changed_questions(records)
