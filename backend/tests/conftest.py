"""Shared fixtures for the question bank tests."""

import pytest

from qcm_bank.services.question_bank.types import QuestionRecord


def make_record(text, index=0, theme="", level="", answer_format="", **kwargs):
    """Build a QuestionRecord with sensible defaults."""
    return QuestionRecord(
        question_text=text,
        source_row_index=index,
        theme=theme,
        level=level,
        answer_format=answer_format,
        **kwargs,
    )


@pytest.fixture
def question_rows():
    """Rows shaped like the civic exam spreadsheet, with variant duplicates."""
    return [
        {
            "ID": 1,
            "Question": "Quelle est la capitale de la France ?",
            "Thème": "Histoire de France",
            "Niveau": "A1",
            "Réponse A": "Paris",
            "Réponse B": "Lyon",
            "Réponse C": "Marseille",
            "Réponse D": "Lille",
            "Bonne réponse": "A",
        },
        {
            "ID": 2,
            "Question": "Variante 1: Quelle est la capitale de la France ?",
            "Thème": "Histoire de France",
            "Niveau": "A2",
            "Réponse A": "Lyon",
            "Réponse B": "Paris",
            "Réponse C": "Nice",
            "Réponse D": "Brest",
            "Bonne réponse": "B",
        },
        {
            "ID": 3,
            "Question": "Quel est le rôle du Président ? (Variante 2)",
            "Thème": "Institutions françaises",
            "Niveau": "B1",
            "Réponse A": "Chef de l'État",
            "Réponse B": "Maire",
            "Réponse C": None,
            "Réponse D": None,
            "Bonne réponse": "A",
        },
        {
            "ID": 4,
            "Question": "Quel est le rôle du Président ?",
            "Thème": "Droits et devoirs",
            "Niveau": "B1",
            "Réponse A": "Chef de l'État",
            "Réponse B": "Juge",
            "Réponse C": None,
            "Réponse D": None,
            "Bonne réponse": "A",
        },
        {
            "ID": 5,
            "Question": "Que signifie la devise « Liberté, Égalité, Fraternité » ?",
            "Thème": None,
            "Niveau": "B2",
            "Réponse A": "Les valeurs de la République",
            "Réponse B": "Un hymne",
            "Réponse C": None,
            "Réponse D": None,
            "Bonne réponse": "A",
        },
        {
            "ID": 6,
            "Question": "(Variante)",
            "Thème": "Histoire de France",
            "Niveau": "A1",
            "Réponse A": "x",
            "Réponse B": "y",
            "Réponse C": None,
            "Réponse D": None,
            "Bonne réponse": "C",
        },
    ]
