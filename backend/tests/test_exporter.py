"""Tests for the datastore documents."""

import json

import pytest

from qcm_bank.services.question_bank import MemoryReportSink, QuestionBankPipeline, RowsTableSource
from qcm_bank.services.question_bank.exporter import (
    DEFAULT_LEVEL,
    build_question_document,
    build_question_documents,
    theme_slug,
    write_documents_json,
)

from conftest import make_record


class TestThemeSlug:
    """Test theme label mapping."""

    @pytest.mark.parametrize("label,expected", [
        ("Histoire de France", "histoire"),
        ("Institutions françaises", "institutions"),
        ("Principes et valeurs", "vals_principes"),
        ("Vie  pratique", "vie_pratique"),
        ("", "general"),
    ])
    def test_slugs(self, label, expected):
        assert theme_slug(label) == expected


class TestBuildQuestionDocument:
    """Test one document."""

    def test_full_record(self):
        """Test every field of a document."""
        record = make_record(
            "Qui vote les lois ?", 4,
            theme="Institutions françaises", level="B1", answer_format="b",
            external_id="42", choices=["Le Président", "Le Parlement", "", ""],
            explanation="Le Parlement vote la loi.",
        )
        document = build_question_document(record, "titre_sejour", "2024-01-01T00:00:00")

        assert document == {
            "id": "q_42",
            "exam_type": "titre_sejour",
            "theme": "institutions",
            "original_theme": "Institutions françaises",
            "level": "Intermédiaire",
            "question": "Qui vote les lois ?",
            "choices": ["Le Président", "Le Parlement"],
            "correct_index": 1,
            "explanation": "Le Parlement vote la loi.",
            "tags": [],
            "is_active": True,
            "created_at": "2024-01-01T00:00:00",
            "updated_at": "2024-01-01T00:00:00",
        }

    def test_defaults(self):
        """Test the fallbacks for a sparse record."""
        record = make_record("Q ?", 7, choices=["x", "y"])
        document = build_question_document(record, "naturalisation", "now")

        assert document["id"] == "q_row7"
        assert document["level"] == DEFAULT_LEVEL
        assert document["theme"] == "general"
        assert document["correct_index"] == 0

    def test_unknown_answer_letter(self):
        """Test that an unreadable answer falls back to the first choice."""
        record = make_record("Q ?", 0, answer_format="E", choices=["x", "y"])
        assert build_question_document(record, "titre_sejour", "now")["correct_index"] == 0


class TestBuildQuestionDocuments:
    """Test the document batch."""

    def test_from_pipeline_output(self, question_rows):
        """Test documents for the emitted records of a run."""
        summary = QuestionBankPipeline().run(RowsTableSource(question_rows), MemoryReportSink())
        documents, skipped = build_question_documents(summary.records)

        assert skipped == 0
        assert [d["id"] for d in documents] == ["q_1", "q_3", "q_5"]
        assert documents[1]["question"] == "Quel est le rôle du Président ?"
        assert all("variante" not in d["question"].lower() for d in documents)
        assert len({d["created_at"] for d in documents}) == 1

    def test_skips_records_without_enough_choices(self):
        """Test that unplayable questions are counted, not exported."""
        records = [
            make_record("A ?", 0, choices=["x", "y"]),
            make_record("B ?", 1, choices=["x", "", "", ""]),
            make_record("C ?", 2),
        ]
        documents, skipped = build_question_documents(records)
        assert [d["question"] for d in documents] == ["A ?"]
        assert skipped == 2

    def test_rejects_undeduplicated_records(self):
        """Test that colliding keys are refused."""
        records = [
            make_record("Qui vote les lois ?", 0, choices=["x", "y"]),
            make_record("qui vote les lois ?", 1, choices=["x", "y"]),
        ]
        with pytest.raises(ValueError):
            build_question_documents(records)

    def test_exam_type(self):
        """Test the exam type applied to every document."""
        documents, _ = build_question_documents([make_record("A ?", 0, choices=["x", "y"])], exam_type="naturalisation")
        assert documents[0]["exam_type"] == "naturalisation"


def test_write_documents_json(tmp_path):
    """Test the JSON array written for the loader."""
    path = tmp_path / "export" / "questions.json"
    documents, _ = build_question_documents([make_record("Où siège le Sénat ?", 0, choices=["Paris", "Lyon"])])
    write_documents_json(path, documents)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == documents
    assert "Sénat" in path.read_text(encoding="utf-8")
