"""Command line entry point for the question bank pipeline.

Usage:
  qcm-bank analyze QCM_Test_Civique_5000.xlsx --json out/report.json --export out/questions.json
  qcm-bank headers QCM_Test_Civique_5000.xlsx
  qcm-bank clean QCM_Test_Civique_5000.xlsx --limit 20
"""

from __future__ import annotations

import argparse
import json
from typing import List

import structlog

from qcm_bank.core.config import settings
from qcm_bank.core.logging_config import configure_logging
from qcm_bank.services.question_bank import (
    ColumnResolver,
    JsonReportSink,
    MultiReportSink,
    QuestionBankPipeline,
    QuestionExtractor,
    SchemaError,
    SourceIOError,
    TextReportSink,
    build_question_documents,
    open_table,
    write_documents_json,
)

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_SOURCE_ERROR = 1
EXIT_SCHEMA_ERROR = 2


def cmd_analyze(args: argparse.Namespace) -> int:
    sinks = []
    if not args.quiet:
        sinks.append(TextReportSink(sample_size=settings.REPORT_SAMPLE_SIZE))
    if args.json:
        sinks.append(JsonReportSink(args.json))

    try:
        source = open_table(args.input, encoding=settings.CSV_ENCODING)
        summary = QuestionBankPipeline().run(source, MultiReportSink(*sinks))
    except SchemaError as e:
        print(f"Error: {e}")
        return EXIT_SCHEMA_ERROR
    except SourceIOError as e:
        print(f"Error: {e}")
        return EXIT_SOURCE_ERROR

    if args.json:
        print(f"Wrote report: {args.json}")

    if args.export:
        documents, skipped = build_question_documents(summary.records, exam_type=settings.EXAM_TYPE)
        write_documents_json(args.export, documents)
        print(f"Wrote {len(documents)} question documents: {args.export}")
        if skipped:
            print(f"  {skipped} question(s) skipped (fewer than 2 answer choices)")

    logger.info("Analysis finished", source=args.input, unique=summary.unique_count, duplicates=summary.duplicate_count)
    return EXIT_OK


def cmd_headers(args: argparse.Namespace) -> int:
    """Show column labels, how they resolve, and the first data row."""
    try:
        source = open_table(args.input, encoding=settings.CSV_ENCODING)
        columns = source.columns
        rows = source.read_rows()
    except SourceIOError as e:
        print(f"Error: {e}")
        return EXIT_SOURCE_ERROR

    print("=== COLUMNS ===")
    print(json.dumps(columns, ensure_ascii=False))

    try:
        mapping = ColumnResolver.resolve(columns)
    except SchemaError as e:
        print(f"Error: {e}")
        return EXIT_SCHEMA_ERROR

    print("\n=== RESOLVED ===")
    print(json.dumps(mapping.to_dict(), ensure_ascii=False, indent=2))
    print("\n=== FIRST ROW ===")
    print(json.dumps(rows[0] if rows else None, ensure_ascii=False, default=str, indent=2))
    print(f"\n=== TOTAL ROWS === {len(rows)}")
    return EXIT_OK


def cmd_clean(args: argparse.Namespace) -> int:
    """Preview the question texts the normalizer would rewrite."""
    extractor = QuestionExtractor()
    try:
        source = open_table(args.input, encoding=settings.CSV_ENCODING)
        records = extractor.ingest(source.read_rows(), source.columns)
    except SchemaError as e:
        print(f"Error: {e}")
        return EXIT_SCHEMA_ERROR
    except SourceIOError as e:
        print(f"Error: {e}")
        return EXIT_SOURCE_ERROR

    changed = 0
    for record, cleaned in extractor.changed_questions(records):
        if args.limit is None or changed < args.limit:
            print(f'row {record.source_row_index}: "{record.question_text}" -> "{cleaned}"')
        changed += 1

    print(f"{changed} question(s) would be cleaned (out of {len(records)})")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="qcm-bank", description="Question bank import and deduplication")
    p.add_argument("--debug", action="store_true", help="Human-readable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    analyze = sub.add_parser("analyze", help="Deduplicate a question table and report category counts")
    analyze.add_argument("input", help="Path to the question table (.xlsx or .csv)")
    analyze.add_argument("--json", help="Write the structured report to this JSON file")
    analyze.add_argument("--export", help="Write datastore documents for the unique questions to this JSON file")
    analyze.add_argument("--quiet", action="store_true", help="Do not print the text report")
    analyze.set_defaults(func=cmd_analyze)

    headers = sub.add_parser("headers", help="Show the table's columns and how they are resolved")
    headers.add_argument("input", help="Path to the question table (.xlsx or .csv)")
    headers.set_defaults(func=cmd_headers)

    clean = sub.add_parser("clean", help="Preview variant-marker cleaning of question texts")
    clean.add_argument("input", help="Path to the question table (.xlsx or .csv)")
    clean.add_argument("--limit", type=int, help="Print at most this many changes")
    clean.set_defaults(func=cmd_clean)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(debug=args.debug or settings.DEBUG, level="DEBUG" if args.debug else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
