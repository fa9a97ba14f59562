"""Table sources: spreadsheets, CSV files and in-memory rows"""

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

import numpy as np
import pandas as pd

from .errors import SourceIOError
from .types import RawRow

logger = logging.getLogger(__name__)


class TableSource(Protocol):
    """Anything that yields rows of column label -> cell value"""

    name: str

    @property
    def columns(self) -> List[str]:
        ...

    def read_rows(self) -> List[RawRow]:
        ...


def _convert_numpy_types(obj):
    """Convert numpy types to Python native types, NaN to None"""
    if isinstance(obj, np.datetime64):
        return None if np.isnat(obj) else pd.Timestamp(obj)
    if isinstance(obj, np.timedelta64):
        return None if np.isnat(obj) else pd.Timedelta(obj)
    if isinstance(obj, np.generic):
        obj = obj.item()
    if isinstance(obj, float) and np.isnan(obj):
        return None
    if obj is pd.NaT:
        return None
    return obj


def dataframe_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Rows of a DataFrame as plain dicts, in frame order"""
    columns = [str(column) for column in df.columns]
    rows = []
    for values in df.itertuples(index=False, name=None):
        rows.append({
            column: _convert_numpy_types(value)
            for column, value in zip(columns, values)
        })
    return rows


class RowsTableSource:
    """Rows already in memory (tests, other parsers)"""

    def __init__(self, rows: Sequence[RawRow], columns: Optional[Sequence[str]] = None, name: str = "<rows>"):
        self._rows = [dict(row) for row in rows]
        if columns is None:
            columns = list(self._rows[0].keys()) if self._rows else []
        self._columns = [str(column) for column in columns]
        self.name = name

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    def read_rows(self) -> List[RawRow]:
        return list(self._rows)


class DataFrameTableSource:
    """A pandas DataFrame; subclasses only override load()"""

    def __init__(self, df: Optional[pd.DataFrame] = None, name: str = "<dataframe>"):
        self._df = df
        self._rows: Optional[List[Dict[str, Any]]] = None
        self.name = name

    def load(self) -> pd.DataFrame:
        return self._df

    def _frame(self) -> pd.DataFrame:
        if self._df is None:
            try:
                self._df = self.load()
            except SourceIOError:
                raise
            except Exception as e:
                logger.error(f"Failed to read {self.name}: {e}")
                raise SourceIOError(self.name, str(e)) from e
            logger.info(f"Loaded {len(self._df)} rows from {self.name}")
        return self._df

    @property
    def columns(self) -> List[str]:
        return [str(column) for column in self._frame().columns]

    def read_rows(self) -> List[RawRow]:
        if self._rows is None:
            self._rows = dataframe_to_rows(self._frame())
        return list(self._rows)


class ExcelTableSource(DataFrameTableSource):
    """First sheet of an .xlsx workbook"""

    def __init__(self, path: Union[str, Path], name: Optional[str] = None):
        self.path = Path(path)
        super().__init__(name=name or str(self.path))

    def load(self) -> pd.DataFrame:
        if not self.path.exists():
            raise SourceIOError(self.name, "file not found")
        with self.path.open("rb") as f:
            return pd.read_excel(f, sheet_name=0, dtype=object)


class CsvTableSource(DataFrameTableSource):
    """A CSV file with a header row"""

    def __init__(self, path: Union[str, Path], encoding: str = "utf-8", name: Optional[str] = None):
        self.path = Path(path)
        self.encoding = encoding
        super().__init__(name=name or str(self.path))

    def load(self) -> pd.DataFrame:
        if not self.path.exists():
            raise SourceIOError(self.name, "file not found")
        with self.path.open("r", encoding=self.encoding, newline="") as f:
            # Keep literal "NA"/"null" cells as text
            return pd.read_csv(f, dtype=str, keep_default_na=False)


class UploadTableSource(DataFrameTableSource):
    """An uploaded file held in memory, dispatched on its extension"""

    def __init__(self, content: bytes, filename: str, encoding: str = "utf-8"):
        self.content = content
        self.filename = filename
        self.encoding = encoding
        super().__init__(name=filename)

    def load(self) -> pd.DataFrame:
        suffix = Path(self.filename).suffix.lower()
        if suffix == ".xlsx":
            return pd.read_excel(io.BytesIO(self.content), sheet_name=0, dtype=object)
        if suffix == ".csv":
            text = self.content.decode(self.encoding)
            return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
        raise SourceIOError(self.name, f"unsupported file type '{suffix or self.filename}'")


def open_table(path: Union[str, Path], encoding: str = "utf-8") -> DataFrameTableSource:
    """Pick the table source for a file path by extension"""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        return ExcelTableSource(path)
    if suffix == ".csv":
        return CsvTableSource(path, encoding=encoding)
    raise SourceIOError(str(path), f"unsupported file type '{suffix or path.name}'")
