"""
===============================================================================
FILE: stage_01_load.py
PROJECT: Presidential Address Datasets
===============================================================================
PURPOSE:
    Load the annual address corpus and the sentiment lexicon, and check
    both against the columns the later stages rely on. This is Stage 1
    of the pipeline.

DESCRIPTION:
    1. Read the address table (one row per address)
    2. Verify the required columns exist and none of them is numeric
    3. Read the word,sentiment lexicon for the configured source

INPUT FILES:
    - data/01_raw/addresses.csv
    - data/01_raw/lexicons/<source>.csv

USAGE:
    python code/stage_01_load.py
===============================================================================
"""

import pandas as pd
from pathlib import Path
from pandas.api.types import is_numeric_dtype
from config import (
    ADDRESSES_FILE, LEXICON_SOURCES, LEXICON_SOURCE,
    REQUIRED_COLUMNS, LEXICON_COLUMNS,
    LEXICON_WORD_COLUMN, SENTIMENT_COLUMN
)
from errors import SchemaError, LexiconLoadError


def validate_columns(df, required, table):
    """
    Check that `required` columns exist and hold text. A date column
    read as numbers (e.g. bare years) is rejected too, since pandas
    would parse the integers as epoch offsets.

    Args:
        df: DataFrame to check
        required: List of column names the caller needs
        table: Name used in the error message

    Raises:
        SchemaError: If a column is missing or numeric
    """
    missing = [col for col in required if col not in df.columns]
    wrong_type = [
        col for col in required
        if col in df.columns and df[col].notna().any() and is_numeric_dtype(df[col])
    ]
    if missing or wrong_type:
        raise SchemaError(table, missing=missing, wrong_type=wrong_type)


def load_addresses(path=ADDRESSES_FILE):
    """
    Load the address corpus.

    Extra columns are kept; the stages ignore them.

    Returns:
        DataFrame with one row per address

    Raises:
        FileNotFoundError: If the corpus file does not exist
        SchemaError: If required columns are missing or mistyped
    """
    path = Path(path)
    print("Loading addresses...")
    if not path.exists():
        raise FileNotFoundError(f"Address corpus not found at {path}")

    df = pd.read_csv(path)
    print(f"  Loaded {len(df):,} addresses")

    validate_columns(df, REQUIRED_COLUMNS, path.name)
    return df


def resolve_lexicon_path(source):
    """Map a named lexicon source to its file; anything else is a path."""
    if source in LEXICON_SOURCES:
        return LEXICON_SOURCES[source]
    return Path(source)


def load_lexicon(source=LEXICON_SOURCE):
    """
    Load a word -> sentiment lexicon.

    Args:
        source: Key of LEXICON_SOURCES or a path to a CSV with
            `word` and `sentiment` columns

    Returns:
        DataFrame with exactly the columns `word`, `sentiment`

    Raises:
        LexiconLoadError: If the file is missing, unreadable, empty or
            lacks the expected columns
    """
    path = resolve_lexicon_path(source)
    print(f"Loading lexicon '{source}'...")

    if not path.exists():
        raise LexiconLoadError(source, f"file not found at {path}")

    try:
        lexicon = pd.read_csv(path, dtype=str)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise LexiconLoadError(source, str(e)) from e

    try:
        validate_columns(lexicon, LEXICON_COLUMNS, path.name)
    except SchemaError as e:
        raise LexiconLoadError(source, str(e)) from e

    lexicon = lexicon[LEXICON_COLUMNS].dropna(subset=[LEXICON_WORD_COLUMN, SENTIMENT_COLUMN])
    if lexicon.empty:
        raise LexiconLoadError(source, "no word,sentiment entries")

    print(f"  Loaded {len(lexicon):,} lexicon entries")
    print(f"  Classes: {sorted(lexicon[SENTIMENT_COLUMN].unique())}")
    return lexicon.reset_index(drop=True)


def main():
    """Load and summarise both inputs."""
    print("\n" + "="*80)
    print("STAGE 1: LOAD INPUTS")
    print("="*80 + "\n")

    df = load_addresses()
    print(f"  Columns: {list(df.columns)}")

    lexicon = load_lexicon()
    print(f"  Distinct words: {lexicon[LEXICON_WORD_COLUMN].nunique():,}")

    print("\n" + "="*80)
    print("STAGE 1 COMPLETE")
    print("="*80 + "\n")


if __name__ == "__main__":
    main()
