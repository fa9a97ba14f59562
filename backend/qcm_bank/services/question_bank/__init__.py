"""
Question Bank Import Pipeline

Cleans, deduplicates and profiles a table of quiz questions before it is
loaded into the application's datastore.

Components:
- types.py: Records, duplicate partitions, distributions, run summary
- errors.py: SchemaError / SourceIOError
- text_cleaner.py: Variant marker stripping and canonical keys
- column_resolver.py: Loose header matching
- question_extractor.py: Rows to question records
- deduplicator.py: First-seen-wins deduplication
- aggregator.py: Per-category counts
- table_source.py: Excel / CSV / in-memory sources (pandas)
- report.py: Text / JSON / in-memory report sinks
- exporter.py: Datastore documents for the unique questions
- processor.py: Orchestrator that runs the stages in order
"""

from .types import (
    CoercionWarning,
    ColumnMapping,
    DedupResult,
    Distribution,
    DuplicateRecord,
    QuestionRecord,
    RawRow,
    RunSummary,
)
from .errors import QuestionBankError, SchemaError, SourceIOError
from .text_cleaner import TextCleaner, normalize, canonical_key
from .column_resolver import ColumnResolver
from .question_extractor import QuestionExtractor, ingest, changed_questions
from .deduplicator import Deduplicator, deduplicate
from .aggregator import Aggregator, CATEGORICAL_FIELDS, aggregate
from .table_source import (
    TableSource,
    RowsTableSource,
    DataFrameTableSource,
    ExcelTableSource,
    CsvTableSource,
    UploadTableSource,
    open_table,
)
from .report import (
    ReportSink,
    TextReportSink,
    JsonReportSink,
    MemoryReportSink,
    MultiReportSink,
)
from .exporter import build_question_documents, write_documents_json
from .processor import QuestionBankPipeline, run

# Export public API
__all__ = [
    # Main classes
    'QuestionBankPipeline',
    'run',

    # Type definitions
    'RawRow',
    'QuestionRecord',
    'DuplicateRecord',
    'DedupResult',
    'Distribution',
    'ColumnMapping',
    'CoercionWarning',
    'RunSummary',

    # Errors
    'QuestionBankError',
    'SchemaError',
    'SourceIOError',

    # Component classes and functions
    'TextCleaner',
    'normalize',
    'canonical_key',
    'ColumnResolver',
    'QuestionExtractor',
    'ingest',
    'changed_questions',
    'Deduplicator',
    'deduplicate',
    'Aggregator',
    'CATEGORICAL_FIELDS',
    'aggregate',

    # Sources and sinks
    'TableSource',
    'RowsTableSource',
    'DataFrameTableSource',
    'ExcelTableSource',
    'CsvTableSource',
    'UploadTableSource',
    'open_table',
    'ReportSink',
    'TextReportSink',
    'JsonReportSink',
    'MemoryReportSink',
    'MultiReportSink',

    # Datastore hand-off
    'build_question_documents',
    'write_documents_json',
]
