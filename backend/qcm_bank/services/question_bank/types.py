"""Type definitions for the question bank pipeline"""

from typing import Any, Dict, List, Mapping, Optional, Tuple
from datetime import datetime

# A row as produced by the table parser: column label -> cell value
RawRow = Mapping[str, Any]


class CoercionWarning:
    """A cell that could not be read as text; the field was left empty"""

    def __init__(self, row_index: int, column: str, field: str, value_type: str, reason: str):
        self.row_index = row_index
        self.column = column
        self.field = field
        self.value_type = value_type
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_index": self.row_index,
            "column": self.column,
            "field": self.field,
            "value_type": self.value_type,
            "reason": self.reason,
        }

    def __repr__(self) -> str:
        return f"CoercionWarning(row={self.row_index}, column={self.column!r}, reason={self.reason!r})"


class QuestionRecord:
    """A typed question derived from one source row"""

    def __init__(
        self,
        question_text: str,
        source_row_index: int,
        theme: str = "",
        level: str = "",
        answer_format: str = "",
        external_id: str = "",
        choices: Optional[List[str]] = None,
        explanation: str = "",
        coercion_warnings: Optional[List[CoercionWarning]] = None
    ):
        self.question_text = question_text
        self.source_row_index = source_row_index
        self.theme = theme
        self.level = level
        self.answer_format = answer_format
        self.external_id = external_id
        self.choices = choices or []
        self.explanation = explanation
        self.coercion_warnings = coercion_warnings or []

    def with_question_text(self, question_text: str) -> "QuestionRecord":
        """Copy of this record carrying a different question text"""
        return QuestionRecord(
            question_text=question_text,
            source_row_index=self.source_row_index,
            theme=self.theme,
            level=self.level,
            answer_format=self.answer_format,
            external_id=self.external_id,
            choices=list(self.choices),
            explanation=self.explanation,
            coercion_warnings=list(self.coercion_warnings),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "question_text": self.question_text,
            "source_row_index": self.source_row_index,
            "theme": self.theme,
            "level": self.level,
            "answer_format": self.answer_format,
            "external_id": self.external_id,
            "choices": list(self.choices),
            "explanation": self.explanation,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuestionRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"QuestionRecord(row={self.source_row_index}, question_text={self.question_text!r})"


class DuplicateRecord:
    """A record classified as duplicate, with the key that collided"""

    def __init__(self, record: QuestionRecord, canonical_key: str, kept_row_index: Optional[int]):
        self.record = record
        self.canonical_key = canonical_key
        # None when the record was dropped for having no content at all
        self.kept_row_index = kept_row_index

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_row_index": self.record.source_row_index,
            "question_text": self.record.question_text,
            "canonical_key": self.canonical_key,
            "kept_row_index": self.kept_row_index,
        }


class DedupResult:
    """Stable partition of the ingested records into unique and duplicate sets"""

    def __init__(self, unique: List[QuestionRecord], duplicates: List[DuplicateRecord]):
        self.unique = unique
        self.duplicates = duplicates

    @property
    def total(self) -> int:
        return len(self.unique) + len(self.duplicates)

    def groups(self) -> List[Tuple[QuestionRecord, List[DuplicateRecord]]]:
        """Kept record and its colliding duplicates, per key, in first-seen order.

        Records dropped for an empty key are not attached to any group.
        """
        by_row = {record.source_row_index: record for record in self.unique}
        grouped: Dict[int, List[DuplicateRecord]] = {}
        for duplicate in self.duplicates:
            if duplicate.kept_row_index is None:
                continue
            grouped.setdefault(duplicate.kept_row_index, []).append(duplicate)
        return [
            (by_row[row_index], grouped[row_index])
            for row_index in sorted(grouped)
        ]


class Distribution:
    """Count of records per category value, plus a bucket for empty values"""

    def __init__(self, field: str, entries: List[Tuple[str, int]], missing: int = 0):
        self.field = field
        self.entries = entries
        self.missing = missing

    @property
    def total(self) -> int:
        return sum(count for _, count in self.entries) + self.missing

    def as_dict(self) -> Dict[str, int]:
        return dict(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "entries": [{"value": value, "count": count} for value, count in self.entries],
            "missing": self.missing,
            "total": self.total,
        }


class ColumnMapping:
    """Source column label resolved for each record field (None if absent)"""

    def __init__(
        self,
        question: str,
        theme: Optional[str] = None,
        level: Optional[str] = None,
        answer_format: Optional[str] = None,
        external_id: Optional[str] = None,
        explanation: Optional[str] = None,
        choices: Optional[List[str]] = None
    ):
        self.question = question
        self.theme = theme
        self.level = level
        self.answer_format = answer_format
        self.external_id = external_id
        self.explanation = explanation
        self.choices = choices or []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "theme": self.theme,
            "level": self.level,
            "answer_format": self.answer_format,
            "external_id": self.external_id,
            "explanation": self.explanation,
            "choices": list(self.choices),
        }


class RunSummary:
    """Result of one pipeline run"""

    def __init__(
        self,
        total_rows: int,
        unique_count: int,
        duplicate_count: int,
        distributions: Dict[str, Distribution],
        columns: Optional[ColumnMapping] = None,
        coercion_warnings: Optional[List[CoercionWarning]] = None,
        duplicate_groups: Optional[List[Dict[str, Any]]] = None,
        empty_question_count: int = 0,
        records: Optional[List[QuestionRecord]] = None,
        source_name: str = "",
        completed_at: Optional[str] = None
    ):
        self.total_rows = total_rows
        self.unique_count = unique_count
        self.duplicate_count = duplicate_count
        self.distributions = distributions
        self.columns = columns
        self.coercion_warnings = coercion_warnings or []
        self.duplicate_groups = duplicate_groups or []
        self.empty_question_count = empty_question_count
        # Emitted unique records (normalized text); not serialized
        self.records = records or []
        self.source_name = source_name
        self.completed_at = completed_at or datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "source": self.source_name,
            "completed_at": self.completed_at,
            "statistics": {
                "total_rows": self.total_rows,
                "unique_questions": self.unique_count,
                "duplicates_removed": self.duplicate_count,
                "empty_questions": self.empty_question_count,
                "coercion_warnings": len(self.coercion_warnings),
            },
            "columns": self.columns.to_dict() if self.columns else None,
            "distributions": {
                name: distribution.to_dict()
                for name, distribution in self.distributions.items()
            },
            "duplicate_groups": self.duplicate_groups,
            "warnings": [warning.to_dict() for warning in self.coercion_warnings],
        }
