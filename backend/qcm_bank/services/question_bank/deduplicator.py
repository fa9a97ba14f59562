"""Question deduplication by canonical key"""

import logging
from typing import Dict, List, Sequence

from .text_cleaner import TextCleaner
from .types import DedupResult, DuplicateRecord, QuestionRecord

logger = logging.getLogger(__name__)


class Deduplicator:
    """Partitions question records into unique and duplicate sets"""

    def __init__(self):
        self.text_cleaner = TextCleaner()

    def deduplicate(self, records: Sequence[QuestionRecord]) -> DedupResult:
        """
        Keep the first record seen for each canonical key.

        Duplication is defined on the normalized, lower-cased question text
        only; theme, level and the other fields are ignored. A record with no
        text left after cleaning is always a duplicate. Both output lists
        keep input order. All state is local to the call.

        Args:
            records: Question records in source order

        Returns:
            DedupResult with unique records and annotated duplicates
        """
        seen: Dict[str, int] = {}
        unique: List[QuestionRecord] = []
        duplicates: List[DuplicateRecord] = []

        for record in records:
            key = self.text_cleaner.canonical_key(record.question_text)

            if not key:
                duplicates.append(DuplicateRecord(record, key, None))
                logger.debug(f"Row {record.source_row_index} has no question text after cleaning")
            elif key not in seen:
                seen[key] = record.source_row_index
                unique.append(record)
            else:
                duplicates.append(DuplicateRecord(record, key, seen[key]))
                logger.debug(
                    f"Row {record.source_row_index} duplicates row {seen[key]}: '{key[:50]}...'"
                )

        if duplicates:
            logger.info(f"Found {len(duplicates)} duplicate question(s) among {len(records)}")

        return DedupResult(unique=unique, duplicates=duplicates)


def deduplicate(records: Sequence[QuestionRecord]) -> DedupResult:
    """Module-level shortcut for Deduplicator().deduplicate"""
    return Deduplicator().deduplicate(records)
