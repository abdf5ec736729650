"""Celebrity pool ingestion from CSV or plain text files.

Handles the usual quirks of hand-maintained name lists:
- A ``name`` column, or a headerless single column of names
- Surrounding quotes and stray whitespace
- Blank lines and case-only duplicates
"""

import logging
from pathlib import Path
from typing import List

import pandas as pd

logger = logging.getLogger(__name__)

NAME_COLUMN = "name"
TEXT_SUFFIXES = {".txt", ".text", ".lst"}


class PoolIngestionError(Exception):
    """Raised when a celebrity pool file cannot be read."""


def _clean_names(series: pd.Series) -> List[str]:
    """Strip, drop blanks and dedupe case-insensitively, keeping first spelling."""
    names = series.dropna().astype(str).str.strip().str.strip('"').str.strip()
    names = names[names != ""]
    keys = names.str.lower()
    deduped = names[~keys.duplicated()]

    dropped = len(names) - len(deduped)
    if dropped:
        logger.info("Dropped %d duplicate celebrity name(s)", dropped)
    return deduped.tolist()


def _read_csv(filepath: Path) -> pd.Series:
    df = pd.read_csv(filepath, dtype=str, skip_blank_lines=True)
    columns = {str(col).strip().lower(): col for col in df.columns}
    if NAME_COLUMN in columns:
        return df[columns[NAME_COLUMN]]

    # No header row: the first line is itself a name
    df = pd.read_csv(filepath, dtype=str, header=None, skip_blank_lines=True)
    return df.iloc[:, 0]


def _read_text(filepath: Path) -> pd.Series:
    lines = filepath.read_text(encoding="utf-8").splitlines()
    return pd.Series(lines, dtype=str)


def read_celebrity_pool(path) -> List[str]:
    """
    Read a celebrity pool file.

    Args:
        path: CSV file (``name`` column, or names in the first column) or a
            plain text file with one name per line

    Returns:
        Cleaned, deduplicated list of names in file order

    Raises:
        PoolIngestionError: If the file is missing, unreadable or empty
    """
    filepath = Path(path)
    if not filepath.exists():
        raise PoolIngestionError(f"Celebrity pool file not found: {filepath}")

    logger.info("Reading celebrity pool: %s", filepath.name)
    try:
        if filepath.suffix.lower() in TEXT_SUFFIXES:
            raw = _read_text(filepath)
        else:
            raw = _read_csv(filepath)
    except pd.errors.EmptyDataError as e:
        raise PoolIngestionError(f"Celebrity pool file is empty: {filepath}") from e
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise PoolIngestionError(f"Failed to read {filepath}: {e}") from e

    names = _clean_names(raw)
    if not names:
        raise PoolIngestionError(f"No celebrity names found in {filepath}")

    logger.info("Loaded %d celebrities from %s", len(names), filepath.name)
    return names
