"""
===============================================================================
FILE: stage_04_sentiment.py
PROJECT: Presidential Address Datasets
===============================================================================
PURPOSE:
    Attach a sentiment class to every token row by a left join against a
    word -> sentiment lexicon. This is Stage 4 of the pipeline.

DESCRIPTION:
    1. Load the token table from Stage 3 and the configured lexicon
    2. De-duplicate the lexicon by word (first entry wins, with a warning)
    3. Left join on token == word; tokens without an entry get an empty
       sentiment. Most tokens are not in any lexicon, so empty is the
       common case, not an error.

    The lexicon is passed in explicitly, so join_sentiment is a pure
    function of its two tables.

INPUT FILES:
    - data/02_cleaned/address_tokens.csv
    - data/01_raw/lexicons/<source>.csv

OUTPUT FILES:
    - data/03_features/address_sentiment_tokens.csv

USAGE:
    python code/stage_04_sentiment.py
===============================================================================
"""

import warnings
from collections.abc import Mapping

import pandas as pd
from config import (
    ADDRESS_TOKENS, SENTIMENT_TOKENS,
    TOKEN_COLUMN, SENTIMENT_COLUMN, LEXICON_WORD_COLUMN, LEXICON_COLUMNS,
    ADDRESS_ID_COLUMN, METADATA_COLUMNS, SENTIMENT_SCHEMA,
    save_table
)
from errors import LexiconLoadError
from stage_01_load import load_lexicon


def lexicon_frame(lexicon):
    """Accept a word -> sentiment mapping or a word,sentiment DataFrame."""
    if isinstance(lexicon, Mapping):
        return pd.DataFrame(
            list(lexicon.items()), columns=LEXICON_COLUMNS
        )

    missing = [col for col in LEXICON_COLUMNS if col not in lexicon.columns]
    if missing:
        raise LexiconLoadError("in-memory lexicon", f"missing columns {missing}")
    return lexicon[LEXICON_COLUMNS]


def deduplicate_lexicon(lexicon):
    """
    Keep the first entry for every word.

    A word listed twice would duplicate the token rows it joins to, so
    duplicates are dropped before the join and reported as a UserWarning.
    """
    duplicated = lexicon.duplicated(subset=[LEXICON_WORD_COLUMN], keep="first")
    if duplicated.any():
        words = sorted(lexicon.loc[duplicated, LEXICON_WORD_COLUMN].unique())
        warnings.warn(
            f"Lexicon lists {len(words)} word(s) more than once; keeping the "
            f"first entry for: {words[:10]}",
            UserWarning,
            stacklevel=2,
        )
        lexicon = lexicon[~duplicated]
    return lexicon.reset_index(drop=True)


def join_sentiment(tokens, lexicon):
    """
    Left join sentiment classes onto token rows.

    Args:
        tokens: Token table with a `token` column
        lexicon: word,sentiment DataFrame or a word -> sentiment mapping

    Returns:
        Token table with an added `sentiment` column, same rows in the
        same order; NaN where the token is not in the lexicon
    """
    print("Joining sentiment lexicon...")
    lexicon = deduplicate_lexicon(lexicon_frame(lexicon))
    lexicon = lexicon.rename(columns={LEXICON_WORD_COLUMN: TOKEN_COLUMN})

    joined = tokens.merge(lexicon, on=TOKEN_COLUMN, how="left", validate="many_to_one")
    if len(joined) != len(tokens):
        raise RuntimeError(
            f"Sentiment join changed the row count: {len(tokens):,} -> {len(joined):,}"
        )

    n_matched = joined[SENTIMENT_COLUMN].notna().sum()
    share = n_matched / len(joined) if len(joined) else 0.0
    print(f"  Matched {n_matched:,} of {len(joined):,} tokens ({share:.1%})")
    return joined


def summarize_sentiment(joined):
    """
    Count matched tokens per sentiment class for every address.

    Returns:
        One row per address with a column per sentiment class, the
        total token count, and `net` = positive - negative when both
        classes exist
    """
    keys = [col for col in METADATA_COLUMNS if col in joined.columns]
    totals = joined.groupby(keys, dropna=False).size().rename("n_tokens")

    matched = joined[joined[SENTIMENT_COLUMN].notna()]
    by_class = (
        matched
        .groupby(keys + [SENTIMENT_COLUMN], dropna=False)
        .size()
        .unstack(SENTIMENT_COLUMN, fill_value=0)
    )

    summary = pd.concat([totals, by_class], axis=1).fillna(0)
    for col in by_class.columns:
        summary[col] = summary[col].astype(int)
    if {"positive", "negative"} <= set(summary.columns):
        summary["net"] = summary["positive"] - summary["negative"]

    summary.columns.name = None
    return summary.reset_index().sort_values(ADDRESS_ID_COLUMN, ignore_index=True)


def main():
    """Execute the Stage 4 sentiment join."""
    print("\n" + "="*80)
    print("STAGE 4: SENTIMENT JOIN")
    print("="*80 + "\n")

    if not ADDRESS_TOKENS.exists():
        raise FileNotFoundError(
            f"Token table not found at {ADDRESS_TOKENS}\n"
            f"Please run stage_03_tokenize.py first."
        )

    tokens = pd.read_csv(ADDRESS_TOKENS, keep_default_na=False)
    print(f"  Loaded {len(tokens):,} token rows")

    lexicon = load_lexicon()
    joined = join_sentiment(tokens, lexicon)
    save_table(joined[list(SENTIMENT_SCHEMA)], SENTIMENT_TOKENS)

    print("\n" + "="*80)
    print("SUMMARY")
    print("="*80)
    print(joined[SENTIMENT_COLUMN].value_counts(dropna=False).to_string())
    print()
    print(summarize_sentiment(joined).to_string(index=False))

    print("\n" + "="*80)
    print("STAGE 4 COMPLETE")
    print("="*80 + "\n")


if __name__ == "__main__":
    main()
