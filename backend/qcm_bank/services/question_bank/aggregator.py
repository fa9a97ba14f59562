"""Frequency distributions over categorical record fields"""

import logging
from operator import attrgetter
from typing import Callable, Dict, Optional, Sequence

from .types import Distribution, QuestionRecord

logger = logging.getLogger(__name__)

FieldAccessor = Callable[[QuestionRecord], Optional[str]]

# Categorical fields reported for every run, in report order
CATEGORICAL_FIELDS: Dict[str, FieldAccessor] = {
    "theme": attrgetter("theme"),
    "level": attrgetter("level"),
    "answer_format": attrgetter("answer_format"),
}


class Aggregator:
    """Counts records per category value for a caller-chosen field"""

    @staticmethod
    def aggregate(
        records: Sequence[QuestionRecord],
        field: FieldAccessor,
        name: str = ""
    ) -> Distribution:
        """
        Count records per value of ``field``.

        Values are compared as-is: "Histoire" and "histoire " are two
        categories. None and "" go to the missing bucket. Entries are sorted
        by descending count, ties kept in first-seen order.
        """
        counts: Dict[str, int] = {}
        missing = 0

        for record in records:
            value = field(record)
            if value is None or value == "":
                missing += 1
                continue
            counts[value] = counts.get(value, 0) + 1

        # sorted() is stable and dicts keep insertion order
        entries = sorted(counts.items(), key=lambda item: -item[1])
        return Distribution(field=name, entries=entries, missing=missing)

    @classmethod
    def aggregate_all(
        cls,
        records: Sequence[QuestionRecord],
        fields: Optional[Dict[str, FieldAccessor]] = None
    ) -> Dict[str, Distribution]:
        """One distribution per named field"""
        fields = CATEGORICAL_FIELDS if fields is None else fields
        return {
            name: cls.aggregate(records, accessor, name=name)
            for name, accessor in fields.items()
        }


def aggregate(records: Sequence[QuestionRecord], field: FieldAccessor, name: str = "") -> Distribution:
    """Module-level shortcut for Aggregator.aggregate"""
    return Aggregator.aggregate(records, field, name=name)
