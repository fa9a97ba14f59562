"""Tests for the pipeline driver."""

import datetime

import pytest

from qcm_bank.services.question_bank import (
    DataFrameTableSource,
    MemoryReportSink,
    QuestionBankPipeline,
    RowsTableSource,
    SchemaError,
    SourceIOError,
    run,
)
from qcm_bank.services.question_bank.text_cleaner import canonical_key


class FailingSource:
    """A table source whose backing store is unreachable."""

    name = "broken.xlsx"

    @property
    def columns(self):
        raise SourceIOError(self.name, "disk unavailable")

    def read_rows(self):
        raise SourceIOError(self.name, "disk unavailable")


@pytest.fixture
def pipeline():
    return QuestionBankPipeline()


class TestRun:
    """Test a full run over the shared fixture."""

    def test_counts(self, pipeline, question_rows):
        """Test the totals reported for the fixture."""
        sink = MemoryReportSink()
        summary = pipeline.run(RowsTableSource(question_rows), sink)

        assert summary.total_rows == 6
        assert summary.unique_count == 3
        assert summary.duplicate_count == 3
        assert summary.empty_question_count == 1
        assert summary.unique_count + summary.duplicate_count == summary.total_rows

    def test_report_written_once(self, pipeline, question_rows):
        """Test that the sink receives the returned summary."""
        sink = MemoryReportSink()
        summary = pipeline.run(RowsTableSource(question_rows), sink)

        assert sink.summaries == [summary]
        assert sink.last is summary

    def test_distributions_cover_unique_records(self, pipeline, question_rows):
        """Test that counts are taken after deduplication."""
        summary = pipeline.run(RowsTableSource(question_rows), MemoryReportSink())

        theme = summary.distributions["theme"]
        assert theme.as_dict() == {"Histoire de France": 1, "Institutions françaises": 1}
        assert theme.missing == 1
        assert summary.distributions["level"].as_dict() == {"A1": 1, "B1": 1, "B2": 1}
        assert summary.distributions["answer_format"].entries == [("A", 3)]
        for distribution in summary.distributions.values():
            assert distribution.total == summary.unique_count

    def test_emitted_records_are_normalized(self, pipeline, question_rows):
        """Test that emitted question texts are cleaned, with distinct keys."""
        summary = pipeline.run(RowsTableSource(question_rows), MemoryReportSink())

        texts = [r.question_text for r in summary.records]
        assert texts == [
            "Quelle est la capitale de la France ?",
            "Quel est le rôle du Président ?",
            "Que signifie la devise « Liberté, Égalité, Fraternité » ?",
        ]
        keys = [canonical_key(text) for text in texts]
        assert len(set(keys)) == len(keys)
        assert all("variante" not in text.lower() for text in texts)

    def test_emitted_records_keep_their_row(self, pipeline, question_rows):
        """Test that a kept variant keeps its own fields."""
        summary = pipeline.run(RowsTableSource(question_rows), MemoryReportSink())
        president = summary.records[1]

        assert president.source_row_index == 2
        assert president.theme == "Institutions françaises"
        assert president.choices[:2] == ["Chef de l'État", "Maire"]

    def test_duplicate_groups(self, pipeline, question_rows):
        """Test the duplicate groups listed in the summary."""
        summary = pipeline.run(RowsTableSource(question_rows), MemoryReportSink())

        assert summary.duplicate_groups == [
            {
                "kept_row_index": 0,
                "question_text": "Quelle est la capitale de la France ?",
                "canonical_key": "quelle est la capitale de la france ?",
                "copies": 2,
                "duplicate_rows": [1],
            },
            {
                "kept_row_index": 2,
                "question_text": "Quel est le rôle du Président ?",
                "canonical_key": "quel est le rôle du président ?",
                "copies": 2,
                "duplicate_rows": [3],
            },
        ]

    def test_source_name_and_columns(self, pipeline, question_rows):
        """Test that the summary records where the data came from."""
        summary = pipeline.run(RowsTableSource(question_rows, name="bank.xlsx"), MemoryReportSink())
        assert summary.source_name == "bank.xlsx"
        assert summary.columns.question == "Question"
        assert summary.columns.theme == "Thème"

    def test_module_level_run(self, question_rows):
        """Test the default-configured shortcut."""
        sink = MemoryReportSink()
        summary = run(RowsTableSource(question_rows), sink)
        assert summary.unique_count == 3

    def test_dataframe_source(self, pipeline):
        """Test a run from a pandas DataFrame."""
        import pandas as pd

        df = pd.DataFrame({
            "Question": ["Qui vote les lois ?", "Qui vote les lois ? (Variante)", None],
            "Thème": ["Institutions", "Institutions", "Droit"],
        })
        summary = pipeline.run(DataFrameTableSource(df), MemoryReportSink())

        assert summary.total_rows == 3
        assert summary.unique_count == 1
        assert summary.empty_question_count == 1

    def test_header_only_table(self, pipeline):
        """Test that a table with no data rows yields an empty summary."""
        sink = MemoryReportSink()
        summary = pipeline.run(RowsTableSource([], columns=["Question", "Thème"]), sink)

        assert summary.total_rows == 0
        assert summary.unique_count == 0
        assert summary.distributions["theme"].total == 0
        assert sink.last is summary

    def test_pipeline_reusable(self, pipeline, question_rows):
        """Test that a second run does not see the first run's keys."""
        first = pipeline.run(RowsTableSource(question_rows), MemoryReportSink())
        second = pipeline.run(RowsTableSource(question_rows), MemoryReportSink())
        assert first.to_dict()["statistics"] == second.to_dict()["statistics"]

    def test_custom_fields(self, question_rows):
        """Test a pipeline configured with its own categorical fields."""
        pipeline = QuestionBankPipeline(fields={"level": lambda r: r.level})
        summary = pipeline.run(RowsTableSource(question_rows), MemoryReportSink())
        assert list(summary.distributions) == ["level"]

    def test_progress_callback(self, pipeline, question_rows):
        """Test that progress is reported through the stages in order."""
        calls = []
        pipeline.run(
            RowsTableSource(question_rows),
            MemoryReportSink(),
            progress_callback=lambda stage, percent, message: calls.append((stage, percent)),
        )

        percents = [percent for _, percent in calls]
        assert percents == sorted(percents)
        assert calls[0][0] == "reading"
        assert calls[-1] == ("completion", 100)


class TestRunFailures:
    """Test fatal errors and recoverable cell problems."""

    def test_missing_question_column(self, pipeline):
        """Test that a schema error aborts without writing a report."""
        rows = [{"Intitulé": "A?", "Thème": "Histoire"}]
        sink = MemoryReportSink()

        with pytest.raises(SchemaError) as exc_info:
            pipeline.run(RowsTableSource(rows), sink)

        assert exc_info.value.missing_column == "Question"
        assert sink.summaries == []

    def test_unreadable_source(self, pipeline):
        """Test that an I/O failure propagates without writing a report."""
        sink = MemoryReportSink()
        with pytest.raises(SourceIOError):
            pipeline.run(FailingSource(), sink)
        assert sink.summaries == []

    def test_coercion_warnings_collected(self, pipeline):
        """Test that unreadable cells are reported and the run continues."""
        rows = [
            {"Question": "Qui vote les lois ?", "Thème": datetime.date(2024, 1, 1)},
            {"Question": datetime.datetime(2024, 1, 1), "Thème": "Droit"},
        ]
        summary = pipeline.run(RowsTableSource(rows), MemoryReportSink())

        assert summary.total_rows == 2
        assert summary.unique_count == 1
        assert [(w.row_index, w.field) for w in summary.coercion_warnings] == [
            (0, "theme"),
            (1, "question_text"),
        ]
        assert summary.to_dict()["statistics"]["coercion_warnings"] == 2


class TestSummaryDict:
    """Test the serialized summary."""

    def test_layout(self, pipeline, question_rows):
        """Test the top-level keys and statistics."""
        data = pipeline.run(RowsTableSource(question_rows, name="bank.csv"), MemoryReportSink()).to_dict()

        assert data["source"] == "bank.csv"
        assert data["statistics"] == {
            "total_rows": 6,
            "unique_questions": 3,
            "duplicates_removed": 3,
            "empty_questions": 1,
            "coercion_warnings": 0,
        }
        assert set(data["distributions"]) == {"theme", "level", "answer_format"}
        assert data["columns"]["question"] == "Question"
        assert data["warnings"] == []
