"""
===============================================================================
FILE: stage_02_prepare.py
PROJECT: Presidential Address Datasets
===============================================================================
PURPOSE:
    Turn the raw address table into the analysis population with stable
    per-address identifiers. This is Stage 2 of the pipeline.

DESCRIPTION:
    1. Derive address_year from date and the pre/post period at the
       cutoff year
    2. Keep addresses from MIN_YEAR onwards delivered in MODALITY
    3. Order the population by date (stable, ties keep source order)
    4. Assign address_id = 1..N in that order
    5. Prune to the columns carried into tokenization

    address_id depends on row order. The date-ascending order produced
    by filter_population is part of the contract: ids are only
    comparable across runs when the input corpus is the same.

INPUT FILES:
    - data/01_raw/addresses.csv

OUTPUT FILES:
    - data/02_cleaned/identified_addresses.csv

USAGE:
    python code/stage_02_prepare.py
===============================================================================
"""

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype
from config import (
    IDENTIFIED_ADDRESSES,
    DATE_COLUMN, DELIVERY_COLUMN, YEAR_COLUMN, PERIOD_COLUMN,
    ADDRESS_ID_COLUMN, PRE_TOKEN_COLUMNS, PRE_PERIOD, POST_PERIOD,
    CUTOFF_YEAR, MIN_YEAR, MODALITY, DATE_POLICY,
    save_table
)
from errors import MalformedDateError, EmptyPopulationError, SchemaError
from helper_row_counts import RowCounts
from stage_01_load import load_addresses

DATE_POLICIES = ("raise", "drop")


def parse_dates(dates):
    """Parse ISO-8601 or other common date strings; failures become NaT."""
    return pd.to_datetime(dates, errors="coerce", format="mixed")


def classify_period(years, cutoff_year=CUTOFF_YEAR):
    """'pre' for years before the cutoff, 'post' from the cutoff year on."""
    return np.where(np.asarray(years) < cutoff_year, PRE_PERIOD, POST_PERIOD)


def annotate_period(df, cutoff_year=CUTOFF_YEAR, on_malformed=DATE_POLICY):
    """
    Add address_year and period columns.

    Args:
        df: Address table with a date column
        cutoff_year: First year labelled "post"
        on_malformed: "raise" to abort on any unparseable or missing
            date, "drop" to reject those rows and annotate the rest

    Returns:
        Copy of df with address_year (int) and period ("pre"/"post").
        Same rows as the input unless on_malformed="drop" rejected some.

    Raises:
        MalformedDateError: If a date cannot be parsed and the policy
            is "raise"
        SchemaError: If the date column holds numbers instead of date
            strings
    """
    if on_malformed not in DATE_POLICIES:
        raise ValueError(f"on_malformed must be one of {DATE_POLICIES}, got {on_malformed!r}")

    print("Annotating address year and period...")
    if df[DATE_COLUMN].notna().any() and is_numeric_dtype(df[DATE_COLUMN]):
        raise SchemaError("addresses", wrong_type=[DATE_COLUMN])

    df = df.copy()
    dates = parse_dates(df[DATE_COLUMN])
    bad = dates.isna()

    if bad.any():
        if on_malformed == "raise":
            raise MalformedDateError(df.index[bad.to_numpy()], df.loc[bad, DATE_COLUMN])
        print(f"  Warning: rejected {bad.sum():,} rows with unparseable dates: "
              f"{df.loc[bad, DATE_COLUMN].tolist()[:5]}")
        df = df[~bad].copy()
        dates = dates[~bad]

    df[YEAR_COLUMN] = dates.dt.year.astype(int)
    df[PERIOD_COLUMN] = classify_period(df[YEAR_COLUMN], cutoff_year)

    n_pre = (df[PERIOD_COLUMN] == PRE_PERIOD).sum()
    print(f"  Cutoff year {cutoff_year}: {n_pre:,} pre, {len(df) - n_pre:,} post")
    return df


def filter_population(df, min_year=MIN_YEAR, modality=MODALITY, counts=None):
    """
    Restrict annotated addresses to the analysis population.

    Keeps rows with address_year >= min_year and delivery == modality,
    then orders them by date ascending with a stable sort. No column is
    dropped and no value is changed, so applying the filter twice gives
    the same table as applying it once.

    Raises:
        EmptyPopulationError: If no rows pass both predicates
    """
    print("Filtering analysis population...")
    input_rows = len(df)

    out = df[df[YEAR_COLUMN] >= min_year]
    print(f"  After year >= {min_year} filter: {len(out):,} rows")
    if counts is not None:
        counts.record("year_filtered", out)

    out = out[out[DELIVERY_COLUMN] == modality]
    print(f"  After delivery == '{modality}' filter: {len(out):,} rows")
    if counts is not None:
        counts.record("filtered", out)

    if out.empty:
        raise EmptyPopulationError(min_year, modality, input_rows)

    out = out.sort_values(DATE_COLUMN, key=parse_dates, kind="stable")
    return out.reset_index(drop=True)


def assign_address_ids(df):
    """
    Number addresses 1..N in their current row order.

    Must run once, after every row-dropping filter and before
    tokenization splits rows.

    Returns:
        Copy of df with address_id as the first column
    """
    if ADDRESS_ID_COLUMN in df.columns:
        raise ValueError(f"{ADDRESS_ID_COLUMN} already assigned")

    df = df.reset_index(drop=True).copy()
    df.insert(0, ADDRESS_ID_COLUMN, np.arange(1, len(df) + 1))
    print(f"  Assigned {ADDRESS_ID_COLUMN} 1..{len(df):,}")
    return df


def select_columns(df):
    """Keep only the columns carried into tokenization."""
    missing = [col for col in PRE_TOKEN_COLUMNS if col not in df.columns]
    if missing:
        raise SchemaError("identified addresses", missing=missing)
    return df[PRE_TOKEN_COLUMNS].copy()


def prepare_addresses(df, cutoff_year=CUTOFF_YEAR, min_year=MIN_YEAR,
                      modality=MODALITY, on_malformed=DATE_POLICY, counts=None):
    """Run annotate -> filter -> assign ids -> prune on a loaded table."""
    if counts is None:
        counts = RowCounts()

    annotated = annotate_period(df, cutoff_year=cutoff_year, on_malformed=on_malformed)
    counts.record("annotated", annotated)

    filtered = filter_population(annotated, min_year=min_year, modality=modality,
                                 counts=counts)
    identified = select_columns(assign_address_ids(filtered))
    counts.record("identified", identified)
    return identified


def main():
    """Execute the Stage 2 preparation."""
    print("\n" + "="*80)
    print("STAGE 2: PREPARE ADDRESS POPULATION")
    print("="*80 + "\n")

    counts = RowCounts()
    df = load_addresses()
    counts.record("loaded", df)

    identified = prepare_addresses(df, counts=counts)
    save_table(identified, IDENTIFIED_ADDRESSES)

    print("\n" + "="*80)
    print("SUMMARY")
    print("="*80)
    counts.report()
    years = identified[YEAR_COLUMN]
    print(f"  Years covered: {years.min()}-{years.max()}")
    print(f"  Presidents: {identified['president'].nunique():,}")

    print("\n" + "="*80)
    print("STAGE 2 COMPLETE")
    print("="*80 + "\n")


if __name__ == "__main__":
    main()
