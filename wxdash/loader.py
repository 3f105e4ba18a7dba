"""
Dataset loader (CSV / Excel -> WeatherEvent list)
=================================================

Reads the installation damage spreadsheet and converts each usable row into a
`WeatherEvent`.

Key ideas:
- Columns are found by header text, never by position.
- Rows with a missing/non-numeric Cost or a missing/invalid date are dropped.
  They are not zero-cost events; each drop is recorded in `IngestResult.dropped`
  and the total is logged.
- Dates are `MM/DD/YY` and always read as 20YY. The event year is taken from
  that date; a literal `Year` column is only compared against it.
- A file that cannot be read at all raises `IngestionError` and nothing is returned.
"""

from __future__ import annotations
from datetime import date, datetime
from io import StringIO
from pathlib import Path
from typing import List, Optional, Union
import logging
import math
import re
import zipfile
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .models import DroppedRow, IngestResult, WeatherEvent

logger = logging.getLogger(__name__)

COL_EVENT = "Weather Event"
COL_DATE = "Date of Weather Event"
COL_YEAR = "Year"
COL_COST = "Cost"
COL_INSTALLATION = "Installation"
COL_STATE = "State"
COL_BRANCH = "Branch"
COL_NAMED_STORM = "Named Storm"

REQUIRED_COLUMNS = (COL_EVENT, COL_DATE, COL_COST, COL_INSTALLATION)

_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{1,2})$")


class IngestionError(RuntimeError):
    """The data source could not be read or is not a usable table."""


def _to_str(x) -> str:
    if x is None or (not isinstance(x, str) and pd.isna(x)): return ""
    return str(x).strip()

def _to_cost(x) -> Optional[float]:
    """Parse a cost cell, returning None if missing/non-numeric/non-finite."""
    if isinstance(x, (int, float)) and not isinstance(x, bool):
        v = float(x)
    else:
        s = _to_str(x)
        if not s: return None
        try: v = float(s)
        except ValueError: return None
    return v if math.isfinite(v) else None

def _to_date(x) -> Optional[date]:
    """Parse `MM/DD/YY` (century 2000). Excel date cells are used as-is."""
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    m = _DATE_RE.match(_to_str(x))
    if not m:
        return None
    month, day, yy = (int(g) for g in m.groups())
    try:
        return date(2000 + yy, month, day)
    except ValueError:
        # e.g. 02/30/23
        return None

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(df: pd.DataFrame, name: str) -> Optional[str]:
    """Find a column by header text (exact first, then case/spacing-insensitive)."""
    cols = list(df.columns)
    if name in cols:
        return name
    norm_map = {_norm(c): c for c in cols}
    return norm_map.get(_norm(name))


def events_from_frame(df: pd.DataFrame) -> IngestResult:
    """Convert a raw table into accepted events plus a list of dropped rows."""
    df = df.rename(columns={c: str(c).strip() for c in df.columns})

    cols = {name: _col(df, name) for name in
            (COL_EVENT, COL_DATE, COL_YEAR, COL_COST, COL_INSTALLATION, COL_STATE, COL_BRANCH, COL_NAMED_STORM)}
    missing = [n for n in REQUIRED_COLUMNS if cols[n] is None]
    if missing:
        raise IngestionError(f"Missing required column(s): {missing}. Available={list(df.columns)}")

    def cell(row, name: str):
        c = cols[name]
        return row[c] if c is not None else None

    events: List[WeatherEvent] = []
    dropped: List[DroppedRow] = []
    for i, (_, row) in enumerate(df.iterrows(), start=1):
        cost = _to_cost(cell(row, COL_COST))
        if cost is None:
            dropped.append(DroppedRow(i, f"invalid cost {_to_str(cell(row, COL_COST))!r}"))
            continue
        occurred = _to_date(cell(row, COL_DATE))
        if occurred is None:
            dropped.append(DroppedRow(i, f"invalid date {_to_str(cell(row, COL_DATE))!r}"))
            continue

        literal_year = _to_str(cell(row, COL_YEAR))
        if literal_year and literal_year != str(occurred.year):
            logger.debug("Row %d: Year column %s differs from date year %d (date wins)", i, literal_year, occurred.year)

        events.append(WeatherEvent(
            event_id=len(events),
            event_description=_to_str(cell(row, COL_EVENT)),
            occurred_on=occurred,
            year=occurred.year,
            cost=cost,
            installation=_to_str(cell(row, COL_INSTALLATION)),
            state=_to_str(cell(row, COL_STATE)),
            branch=_to_str(cell(row, COL_BRANCH)),
            named_storm=_to_str(cell(row, COL_NAMED_STORM)),
        ))

    if dropped:
        logger.warning("Dropped %d of %d rows (invalid cost or date)", len(dropped), len(df))
    logger.info("Ingested %d weather events", len(events))
    return IngestResult(events=tuple(events), dropped=tuple(dropped))


def _read_csv(source) -> pd.DataFrame:
    # Every cell as text: cost/date parsing is done per row above.
    return pd.read_csv(source, dtype=str, keep_default_na=False, skipinitialspace=True)


def parse_weather_csv(text: str) -> IngestResult:
    """Parse CSV text already in memory."""
    try:
        df = _read_csv(StringIO(text))
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise IngestionError(f"Could not parse CSV data: {e}") from e
    return events_from_frame(df)


def load_weather_data(source: Union[str, Path]) -> IngestResult:
    """Load a `.csv` (path or URL) or `.xlsx` workbook.

    Raises IngestionError if the resource is unreachable or not tabular.
    """
    s = str(source)
    logger.info("Loading weather damage data from %s", s)
    try:
        if s.lower().endswith((".xlsx", ".xlsm")):
            df = pd.read_excel(s, engine="openpyxl", dtype=object)
        else:
            df = _read_csv(s)
    except (OSError, ValueError, zipfile.BadZipFile, InvalidFileException,
            pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise IngestionError(f"Error fetching data from {s}: {e}") from e
    return events_from_frame(df)
