"""
===============================================================================
FILE: stage_06_cooccurrence.py
PROJECT: Presidential Address Datasets
===============================================================================
PURPOSE:
    Build the word co-occurrence dataset: for each period, how many
    addresses contain both words of a pair. This is Stage 6 of the
    pipeline.

DESCRIPTION:
    1. Keep content words (same rules as Stage 5)
    2. Per period, build a binary address x word matrix restricted to
       words found in at least MIN_DOC_FREQ addresses, capped at the
       TOP_N_WORDS most widespread
    3. X.T @ X gives, for every word pair, the number of addresses
       containing both; keep the upper triangle as (item1 < item2)

INPUT FILES:
    - data/02_cleaned/address_tokens.csv

OUTPUT FILES:
    - data/03_features/period_word_cooccurrence.csv

USAGE:
    python code/stage_06_cooccurrence.py
===============================================================================
"""

import pandas as pd
from config import (
    ADDRESS_TOKENS, COOCCURRENCE,
    ADDRESS_ID_COLUMN, PERIOD_COLUMN, COOCCURRENCE_SCHEMA,
    MIN_DOC_FREQ, TOP_N_WORDS,
    save_table
)
from stage_05_topics import content_tokens, build_document_term_matrix


def period_cooccurrence(content, min_doc_freq=MIN_DOC_FREQ, top_n=TOP_N_WORDS):
    """
    Address-level co-occurrence counts for the words of one period.

    Returns:
        DataFrame with item1, item2, n (item1 sorts before item2)
    """
    X, _, vocabulary = build_document_term_matrix(
        content, binary=True, min_df=min_doc_freq, max_features=top_n
    )
    pairs = (X.T @ X).tocoo()
    upper = pairs.row < pairs.col

    return pd.DataFrame({
        "item1": vocabulary[pairs.row[upper]],
        "item2": vocabulary[pairs.col[upper]],
        "n": pairs.data[upper].astype(int),
    })


def cooccurrence(tokens, min_doc_freq=MIN_DOC_FREQ, top_n=TOP_N_WORDS):
    """
    Word-pair co-occurrence counts for every period.

    A period whose addresses leave no word at min_doc_freq contributes
    no rows; a warning is printed for it.

    Returns:
        DataFrame with the COOCCURRENCE_SCHEMA columns
    """
    print("Building co-occurrence table...")
    content = content_tokens(tokens)

    frames = []
    for period, group in content.groupby(PERIOD_COLUMN, sort=True):
        n_docs = group[ADDRESS_ID_COLUMN].nunique()
        try:
            pairs = period_cooccurrence(group, min_doc_freq=min_doc_freq, top_n=top_n)
        except ValueError as e:
            # CountVectorizer raises when min_df prunes every word
            print(f"  Warning: no co-occurrence vocabulary for '{period}' "
                  f"({n_docs:,} addresses): {e}")
            continue

        pairs.insert(0, PERIOD_COLUMN, period)
        print(f"  {period}: {n_docs:,} addresses -> {len(pairs):,} word pairs")
        frames.append(pairs)

    if not frames:
        return pd.DataFrame(columns=list(COOCCURRENCE_SCHEMA))

    result = pd.concat(frames, ignore_index=True)
    return result[list(COOCCURRENCE_SCHEMA)].sort_values(
        [PERIOD_COLUMN, "n", "item1", "item2"], ascending=[True, False, True, True],
        ignore_index=True
    )


def main():
    """Execute the Stage 6 co-occurrence build."""
    print("\n" + "="*80)
    print("STAGE 6: WORD CO-OCCURRENCE")
    print("="*80 + "\n")

    if not ADDRESS_TOKENS.exists():
        raise FileNotFoundError(
            f"Token table not found at {ADDRESS_TOKENS}\n"
            f"Please run stage_03_tokenize.py first."
        )

    tokens = pd.read_csv(ADDRESS_TOKENS, keep_default_na=False)
    pairs = cooccurrence(tokens)
    save_table(pairs, COOCCURRENCE)

    print("\n" + "="*80)
    print("SUMMARY")
    print("="*80)
    for period, group in pairs.groupby(PERIOD_COLUMN):
        top = group.head(5)
        print(f"\n  Most common pairs ({period}):")
        for _, row in top.iterrows():
            print(f"    {row['item1']} + {row['item2']}: {row['n']}")

    print("\n" + "="*80)
    print("STAGE 6 COMPLETE")
    print("="*80 + "\n")


if __name__ == "__main__":
    main()
