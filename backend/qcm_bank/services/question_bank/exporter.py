"""
Datastore hand-off

Turns the emitted (unique, normalized) question records into the documents
stored by the quiz application, and writes them to a JSON file for the
loader.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Union

from .text_cleaner import TextCleaner
from .types import QuestionRecord

logger = logging.getLogger(__name__)

# Spreadsheet theme label -> datastore theme slug
THEME_MAP: Dict[str, str] = {
    "Société et citoyenneté": "societe",
    "Histoire de France": "histoire",
    "Institutions françaises": "institutions",
    "Valeurs de la République": "vals_principes",
    "Droits et devoirs": "droits",
    "Géographie": "geographie",
    "Principes et valeurs": "vals_principes",
}

LEVEL_MAP: Dict[str, str] = {
    "A1": "Débutant",
    "A2": "Débutant",
    "B1": "Intermédiaire",
    "B2": "Avancé",
    "Débutant": "Débutant",
    "Intermédiaire": "Intermédiaire",
    "Avancé": "Avancé",
}
DEFAULT_LEVEL = "Débutant"
DEFAULT_THEME = "general"

ANSWER_INDEX = {"A": 0, "B": 1, "C": 2, "D": 3}
MIN_CHOICES = 2


def theme_slug(label: str) -> str:
    if label in THEME_MAP:
        return THEME_MAP[label]
    slug = re.sub(r"\s+", "_", label.strip().lower())
    return slug or DEFAULT_THEME


def build_question_document(record: QuestionRecord, exam_type: str, created_at: str) -> Dict[str, Any]:
    """Datastore document for one emitted record"""
    choices = [choice for choice in record.choices if choice]
    answer_letter = (record.answer_format or "A").strip().upper()
    document_id = f"q_{record.external_id}" if record.external_id else f"q_row{record.source_row_index}"

    return {
        "id": document_id,
        "exam_type": exam_type,
        "theme": theme_slug(record.theme),
        "original_theme": record.theme,
        "level": LEVEL_MAP.get(record.level, DEFAULT_LEVEL),
        "question": record.question_text,
        "choices": choices,
        "correct_index": ANSWER_INDEX.get(answer_letter, 0),
        "explanation": record.explanation,
        "tags": [],
        "is_active": True,
        "created_at": created_at,
        "updated_at": created_at,
    }


def build_question_documents(
    records: Sequence[QuestionRecord],
    exam_type: str = "titre_sejour"
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Build datastore documents for the emitted records.

    Records with fewer than two answer choices cannot be played and are
    skipped.

    Returns:
        Tuple of (documents, skipped_count)

    Raises:
        ValueError: if two records share a canonical key
    """
    seen = set()
    for record in records:
        key = TextCleaner.canonical_key(record.question_text)
        if key in seen:
            raise ValueError(f"Records must be deduplicated before export (row {record.source_row_index})")
        seen.add(key)

    created_at = datetime.now().isoformat()
    documents = []
    skipped = 0
    for record in records:
        if sum(1 for choice in record.choices if choice) < MIN_CHOICES:
            logger.debug(f"Skipping row {record.source_row_index}: fewer than {MIN_CHOICES} choices")
            skipped += 1
            continue
        documents.append(build_question_document(record, exam_type, created_at))

    if skipped > 0:
        logger.warning(f"Skipped {skipped} question(s) with missing answer choices")
    logger.info(f"Built {len(documents)} question documents")
    return documents, skipped


def write_documents_json(path: Union[str, Path], documents: Sequence[Dict[str, Any]]) -> None:
    """Write documents as a JSON array, rendered in memory first"""
    path = Path(path)
    content = json.dumps(list(documents), ensure_ascii=False, indent=2)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(content)
        f.write("\n")
    logger.info(f"Wrote {len(documents)} documents to {path}")
