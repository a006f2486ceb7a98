"""
===============================================================================
FILE: stage_03_tokenize.py
PROJECT: Presidential Address Datasets
===============================================================================
PURPOSE:
    Split every address into one row per word token while keeping the
    address metadata on each row. This is Stage 3 of the pipeline.

DESCRIPTION:
    1. Load identified addresses from Stage 2
    2. Tokenize text with spaCy's rule-based English tokenizer:
       - Lowercasing
       - Split at whitespace and punctuation tokens
       - Contraction and possessive pieces joined back ("can't",
         "america's")
       - Leading/trailing punctuation stripped from each word
    3. Expand to one row per (address_id, token), numbering tokens
       1..K within each address in reading order

    Addresses with empty text produce no token rows. Consumers must not
    assume every address_id appears in the token table.

INPUT FILES:
    - data/02_cleaned/identified_addresses.csv

OUTPUT FILES:
    - data/02_cleaned/address_tokens.csv

DEPENDENCIES:
    - spacy (blank English pipeline, no model download)
    - pandas
    - tqdm

USAGE:
    python code/stage_03_tokenize.py
===============================================================================
"""

import re
import pandas as pd
import spacy
from tqdm import tqdm
from config import (
    IDENTIFIED_ADDRESSES, ADDRESS_TOKENS,
    TEXT_COLUMN, TOKEN_COLUMN, TOKEN_ID_COLUMN,
    BATCH_SIZE, save_table
)

# Tokenizer rules only; no tagger, parser or NER is needed to split words
nlp = spacy.blank("en")

EDGE_PUNCT = re.compile(r"^\W+|\W+$")


def normalize_word(text):
    """Lowercase a word and strip punctuation from its edges."""
    return EDGE_PUNCT.sub("", text.lower())


def doc_words(doc):
    """
    Words of a spaCy Doc, split at whitespace and punctuation.

    spaCy splits contractions and possessives into pieces with no
    whitespace between them ("ca" + "n't", "America" + "'s"); those
    pieces are joined back into one word.
    """
    words = []
    pieces = []
    for token in doc:
        if token.is_space or token.is_punct:
            if pieces:
                words.append(normalize_word("".join(pieces)))
                pieces = []
            continue

        pieces.append(token.text)
        if token.whitespace_:
            words.append(normalize_word("".join(pieces)))
            pieces = []

    if pieces:
        words.append(normalize_word("".join(pieces)))

    # Symbol-only pieces normalize to ""
    return [word for word in words if word]


def tokenize_text(text_series, batch_size=BATCH_SIZE):
    """
    Split texts into lowercase word tokens.

    Example:
        "The economy is strong."
        -> ["the", "economy", "is", "strong"]

    Args:
        text_series: pandas Series or list of texts; missing values
            are treated as empty text
        batch_size: Number of texts spaCy processes at once

    Returns:
        List of token lists, one per input text, in input order
    """
    texts = ["" if pd.isna(text) else str(text) for text in text_series]

    tokenized = []
    for doc in tqdm(
        nlp.pipe(texts, batch_size=batch_size),
        total=len(texts),
        desc="Tokenizing addresses"
    ):
        tokenized.append(doc_words(doc))

    return tokenized


def unnest_tokens(df, text_column=TEXT_COLUMN, batch_size=BATCH_SIZE):
    """
    Expand an address table into one row per token.

    Every column except `text_column` is copied onto each token row, and
    token_id numbers the tokens of each address 1..K in text order.

    Args:
        df: Identified address table
        text_column: Column holding the free text

    Returns:
        DataFrame with the metadata columns, token and token_id. Its row
        count is the total number of tokens across all addresses.
    """
    print("Expanding addresses to token rows...")
    df = df.reset_index(drop=True)
    tokenized = tokenize_text(df[text_column], batch_size=batch_size)

    tokens = df.drop(columns=[text_column])
    tokens[TOKEN_COLUMN] = pd.Series(tokenized, index=tokens.index, dtype=object)

    # explode() leaves a NaN row for an empty list
    tokens = tokens.explode(TOKEN_COLUMN)
    tokens = tokens[tokens[TOKEN_COLUMN].notna()].copy()

    # The index still identifies the source address after explode()
    tokens[TOKEN_ID_COLUMN] = tokens.groupby(level=0).cumcount().to_numpy() + 1
    tokens[TOKEN_COLUMN] = tokens[TOKEN_COLUMN].astype(str)
    tokens = tokens.reset_index(drop=True)

    n_empty = sum(1 for doc_tokens in tokenized if not doc_tokens)
    print(f"  {len(df):,} addresses -> {len(tokens):,} token rows")
    if n_empty:
        print(f"  Warning: {n_empty:,} addresses had no tokens and are absent from the token table")

    return tokens


def tokenize_addresses(path=IDENTIFIED_ADDRESSES):
    """Load identified addresses from Stage 2 and expand them to tokens."""
    print("Loading identified addresses...")

    if not path.exists():
        raise FileNotFoundError(
            f"Identified addresses not found at {path}\n"
            f"Please run stage_02_prepare.py first."
        )

    df = pd.read_csv(path)
    print(f"  Loaded {len(df):,} addresses")
    return unnest_tokens(df)


def main():
    """Execute the Stage 3 tokenization."""
    print("\n" + "="*80)
    print("STAGE 3: TOKENIZATION")
    print("="*80 + "\n")

    tokens = tokenize_addresses()
    save_table(tokens, ADDRESS_TOKENS)

    per_address = tokens.groupby("address_id").size()
    print("\n" + "="*80)
    print("SUMMARY")
    print("="*80)
    print(f"  Total tokens: {len(tokens):,}")
    print(f"  Addresses with tokens: {len(per_address):,}")
    print(f"  Average tokens per address: {per_address.mean():.1f}")
    print(f"  Min tokens: {per_address.min()}")
    print(f"  Max tokens: {per_address.max()}")

    print("\n" + "="*80)
    print("STAGE 3 COMPLETE")
    print("="*80 + "\n")


if __name__ == "__main__":
    main()
