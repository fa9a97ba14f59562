"""Error taxonomy for the question bank pipeline"""

from typing import List, Optional


class QuestionBankError(Exception):
    """Base class for fatal pipeline errors"""


class SchemaError(QuestionBankError, ValueError):
    """A required column could not be resolved from the source table"""

    def __init__(self, missing_column: str, available_columns: Optional[List[str]] = None):
        self.missing_column = missing_column
        self.available_columns = list(available_columns or [])
        super().__init__(
            f"Missing required column '{missing_column}' "
            f"(available columns: {self.available_columns})"
        )


class SourceIOError(QuestionBankError, IOError):
    """The table source could not produce rows"""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Could not read table source {source}: {message}")
