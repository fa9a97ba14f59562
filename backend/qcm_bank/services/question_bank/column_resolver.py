"""Column resolution for question tables with inconsistent headers"""

import logging
import unicodedata
from typing import Iterable, List, Optional, Sequence

from .errors import SchemaError
from .types import ColumnMapping

logger = logging.getLogger(__name__)

QUESTION_LABEL = "question"
ID_LABEL = "id"

# Accepted spellings, matched as substrings of the cleaned header label
THEME_SPELLINGS = ("thème", "theme", "th3me", "théme", "thême")
LEVEL_SPELLINGS = ("niveau", "level")
ANSWER_FORMAT_SPELLINGS = (
    "bonne réponse",
    "bonne reponse",
    "réponse correcte",
    "reponse correcte",
    "correct",
)
EXPLANATION_SPELLINGS = ("explication", "explanation")

CHOICE_LETTERS = ("A", "B", "C", "D")
CHOICE_PREFIXES = ("réponse", "reponse", "answer", "choix")


def clean_label(label) -> str:
    """Header label as compared: NFC, stripped, lower-cased"""
    if label is None:
        return ""
    return unicodedata.normalize("NFC", str(label)).strip().lower()


class ColumnResolver:
    """Maps loosely spelled header labels onto question record fields"""

    @staticmethod
    def find_exact(columns: Sequence[str], label: str) -> Optional[str]:
        for column in columns:
            if clean_label(column) == label:
                return column
        return None

    @staticmethod
    def find_matching(
        columns: Sequence[str],
        spellings: Iterable[str],
        exclude: Iterable[Optional[str]] = ()
    ) -> Optional[str]:
        """First column whose cleaned label contains one of the spellings"""
        spellings = tuple(spellings)
        excluded = set(c for c in exclude if c is not None)
        for column in columns:
            if column in excluded:
                continue
            cleaned = clean_label(column)
            if any(spelling in cleaned for spelling in spellings):
                return column
        return None

    @classmethod
    def find_choice_columns(cls, columns: Sequence[str]) -> List[str]:
        """Answer choice columns ("Réponse A".."Réponse D", or bare "A".."D"), in letter order"""
        found = []
        for letter in CHOICE_LETTERS:
            wanted = {letter.lower()} | {f"{prefix} {letter.lower()}" for prefix in CHOICE_PREFIXES}
            for column in columns:
                if clean_label(column) in wanted:
                    found.append(column)
                    break
        return found

    @classmethod
    def resolve(cls, columns: Sequence[str]) -> ColumnMapping:
        """
        Resolve every field against the header labels.

        Raises:
            SchemaError: if no column is labelled "question"
        """
        columns = [str(column) for column in columns]

        question = cls.find_exact(columns, QUESTION_LABEL)
        if question is None:
            logger.error(f"No question column among {columns}")
            raise SchemaError("Question", columns)

        theme = cls.find_matching(columns, THEME_SPELLINGS, exclude=[question])
        level = cls.find_matching(columns, LEVEL_SPELLINGS, exclude=[question, theme])
        answer_format = cls.find_matching(
            columns, ANSWER_FORMAT_SPELLINGS, exclude=[question, theme, level]
        )
        explanation = cls.find_matching(
            columns, EXPLANATION_SPELLINGS, exclude=[question, theme, level, answer_format]
        )
        mapping = ColumnMapping(
            question=question,
            theme=theme,
            level=level,
            answer_format=answer_format,
            external_id=cls.find_exact(columns, ID_LABEL),
            explanation=explanation,
            choices=cls.find_choice_columns(columns),
        )

        for field_name, column in mapping.to_dict().items():
            if not column:
                logger.info(f"Column for '{field_name}' not found; field left empty")
        return mapping
