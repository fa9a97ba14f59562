"""Main question bank pipeline orchestrator"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .aggregator import Aggregator, CATEGORICAL_FIELDS, FieldAccessor
from .column_resolver import ColumnResolver
from .deduplicator import Deduplicator
from .errors import SchemaError, SourceIOError
from .question_extractor import QuestionExtractor
from .report import ReportSink
from .table_source import TableSource
from .text_cleaner import TextCleaner
from .types import DedupResult, RunSummary

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, str], None]


class QuestionBankPipeline:
    """
    Reads a question table, removes duplicates and reports category counts.

    The pipeline object holds configuration only. Every run allocates its
    own records, seen-key set and counters, so one instance can serve
    several runs, including concurrent ones.
    """

    def __init__(
        self,
        fields: Optional[Dict[str, FieldAccessor]] = None
    ):
        self.fields = dict(CATEGORICAL_FIELDS if fields is None else fields)
        self.question_extractor = QuestionExtractor()
        self.deduplicator = Deduplicator()
        self.aggregator = Aggregator()

    def run(
        self,
        source: TableSource,
        report: ReportSink,
        progress_callback: Optional[ProgressCallback] = None
    ) -> RunSummary:
        """
        Process one table through the complete pipeline.

        Raises:
            SourceIOError: the source could not be read; nothing is reported
            SchemaError: no question column; nothing is reported
        """
        def progress(stage: str, percent: int, message: str) -> None:
            logger.info(f"[{stage}] {message}")
            if progress_callback:
                progress_callback(stage, percent, message)

        source_name = getattr(source, "name", "") or ""

        try:
            progress("reading", 10, f"Reading {source_name or 'table'}...")
            rows = source.read_rows()
            columns = source.columns
            progress("reading", 20, f"Loaded {len(rows)} rows")

            mapping = ColumnResolver.resolve(columns)
            progress("ingestion", 30, "Extracting questions...")
            records = self.question_extractor.extract_records(rows, mapping)
        except SourceIOError as e:
            logger.error(f"Source could not be read: {e}")
            raise
        except SchemaError as e:
            logger.error(f"Aborting run, schema not recognised: {e}")
            raise

        progress("deduplication", 60, "Removing duplicates...")
        result = self.deduplicator.deduplicate(records)
        progress(
            "deduplication", 75,
            f"Removed {len(result.duplicates)} duplicates, {len(result.unique)} unique questions remain"
        )

        progress("aggregation", 85, "Counting categories...")
        distributions = self.aggregator.aggregate_all(result.unique, self.fields)

        emitted = [
            record.with_question_text(TextCleaner.normalize(record.question_text))
            for record in result.unique
        ]
        warnings = [warning for record in records for warning in record.coercion_warnings]

        summary = RunSummary(
            total_rows=len(records),
            unique_count=len(result.unique),
            duplicate_count=len(result.duplicates),
            distributions=distributions,
            columns=mapping,
            coercion_warnings=warnings,
            duplicate_groups=self._duplicate_groups(result),
            empty_question_count=sum(1 for d in result.duplicates if d.kept_row_index is None),
            records=emitted,
            source_name=source_name,
        )
        progress("report", 95, "Writing report...")
        report.write(summary)
        progress("completion", 100, "Processing completed successfully!")
        return summary

    def _duplicate_groups(self, result: DedupResult) -> List[Dict[str, Any]]:
        """Duplicate groups as plain dicts, for reports"""
        groups = []
        for kept, duplicates in result.groups():
            groups.append({
                "kept_row_index": kept.source_row_index,
                "question_text": TextCleaner.normalize(kept.question_text),
                "canonical_key": duplicates[0].canonical_key,
                "copies": len(duplicates) + 1,
                "duplicate_rows": [d.record.source_row_index for d in duplicates],
            })
        return groups


def run(source: TableSource, report: ReportSink) -> RunSummary:
    """Run the pipeline with default settings"""
    return QuestionBankPipeline().run(source, report)
