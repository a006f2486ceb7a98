"""
===============================================================================
FILE: stage_05_topics.py
PROJECT: Presidential Address Datasets
===============================================================================
PURPOSE:
    Build the topic-frequency datasets from the token table. This is
    Stage 5 of the pipeline.

DESCRIPTION:
    1. Keep content words: alphabetic tokens that are not spaCy English
       stop words (both switches live in config)
    2. Build an address x word count matrix with scikit-learn's
       CountVectorizer on the pre-tokenized addresses
    3. Emit a long table of (address, word, n, tf_idf), where
       tf = n / words in the address and idf = ln(addresses / addresses
       containing the word)
    4. Emit word counts and shares per period

INPUT FILES:
    - data/02_cleaned/address_tokens.csv

OUTPUT FILES:
    - data/03_features/address_topic_frequency.csv
    - data/03_features/period_word_frequency.csv
    - data/03_features/doc_term_matrix.pkl

DEPENDENCIES:
    - scikit-learn (CountVectorizer, TfidfTransformer for idf)
    - spacy (English stop word list)
    - numpy, pandas

USAGE:
    python code/stage_05_topics.py
===============================================================================
"""

import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer, TfidfTransformer
from spacy.lang.en.stop_words import STOP_WORDS
from config import (
    ADDRESS_TOKENS, TOPIC_FREQUENCY, PERIOD_FREQUENCY, DOC_TERM_MATRIX,
    ADDRESS_ID_COLUMN, TOKEN_COLUMN, PERIOD_COLUMN, METADATA_COLUMNS,
    TOPIC_SCHEMA, PERIOD_FREQUENCY_SCHEMA,
    REMOVE_STOPWORDS, ALPHA_ONLY,
    save_table, save_pickle, create_sparse_dataframe
)


def identity(x):
    return x


def create_count_vectorizer(binary=False, min_df=1, max_features=None):
    """
    Count vectorizer for token lists that are already tokenized and
    lowercased.
    """
    return CountVectorizer(
        preprocessor=identity,  # No preprocessing (already tokenized)
        tokenizer=identity,  # No tokenization (already tokenized)
        token_pattern=None,  # Disable regex tokenization
        lowercase=False,
        binary=binary,
        min_df=min_df,
        max_features=max_features
    )


def content_tokens(tokens, remove_stopwords=REMOVE_STOPWORDS, alpha_only=ALPHA_ONLY):
    """Drop stop words and non-alphabetic tokens from the token table."""
    keep = pd.Series(True, index=tokens.index)
    words = tokens[TOKEN_COLUMN].astype(str)

    if alpha_only:
        keep &= words.str.isalpha()

    if remove_stopwords:
        keep &= ~words.isin(STOP_WORDS)

    content = tokens[keep]
    print(f"  Kept {len(content):,} of {len(tokens):,} tokens as content words")
    return content


def build_document_term_matrix(content, **vectorizer_args):
    """
    Count matrix with one row per address present in `content`.

    Returns:
        tuple: (X, address_ids, vocabulary)
            - X: scipy sparse matrix, addresses x words
            - address_ids: Index of address_id for the rows of X
            - vocabulary: array of words for the columns of X, sorted
    """
    docs = content.groupby(ADDRESS_ID_COLUMN, sort=True)[TOKEN_COLUMN].agg(list)
    vectorizer = create_count_vectorizer(**vectorizer_args)
    X = vectorizer.fit_transform(docs.tolist())
    return X, docs.index, vectorizer.get_feature_names_out()


def topic_frequency(tokens, remove_stopwords=REMOVE_STOPWORDS, alpha_only=ALPHA_ONLY):
    """
    Word counts and tf-idf per address.

    Returns:
        tuple: (topic_df, doc_term_df)
            - topic_df: long table with the TOPIC_SCHEMA columns
            - doc_term_df: sparse address x word count DataFrame
              (None when no content words remain)
    """
    print("Building topic-frequency table...")
    content = content_tokens(tokens, remove_stopwords=remove_stopwords, alpha_only=alpha_only)
    if content.empty:
        print("  Warning: no content words left, topic table is empty")
        return pd.DataFrame(columns=list(TOPIC_SCHEMA)), None

    X, address_ids, vocabulary = build_document_term_matrix(content)
    n_docs = X.shape[0]
    coo = X.tocoo()

    long = pd.DataFrame({
        ADDRESS_ID_COLUMN: np.asarray(address_ids)[coo.row],
        TOKEN_COLUMN: vocabulary[coo.col],
        "n": coo.data.astype(int),
    })

    # Unsmoothed idf_ is ln(N / df) + 1; drop the +1 so shared words score 0
    transformer = TfidfTransformer(norm=None, smooth_idf=False).fit(X)
    idf = transformer.idf_ - 1.0
    tf = long["n"] / long.groupby(ADDRESS_ID_COLUMN)["n"].transform("sum")
    long["tf_idf"] = tf.to_numpy() * idf[coo.col]

    metadata = tokens[METADATA_COLUMNS].drop_duplicates(ADDRESS_ID_COLUMN)
    topic_df = long.merge(metadata, on=ADDRESS_ID_COLUMN, how="left")
    topic_df = topic_df[list(TOPIC_SCHEMA)].sort_values(
        [ADDRESS_ID_COLUMN, "n", TOKEN_COLUMN], ascending=[True, False, True],
        ignore_index=True
    )

    print(f"  {n_docs:,} addresses x {len(vocabulary):,} words -> {len(topic_df):,} rows")
    doc_term_df = create_sparse_dataframe(X, index=address_ids, feature_names=vocabulary)
    return topic_df, doc_term_df


def period_frequency(topic_df):
    """Total count and within-period share of every word."""
    counts = (
        topic_df
        .groupby([PERIOD_COLUMN, TOKEN_COLUMN], as_index=False)["n"]
        .sum()
    )
    counts["share"] = counts["n"] / counts.groupby(PERIOD_COLUMN)["n"].transform("sum")
    return counts[list(PERIOD_FREQUENCY_SCHEMA)].sort_values(
        [PERIOD_COLUMN, "n", TOKEN_COLUMN], ascending=[True, False, True],
        ignore_index=True
    )


def main():
    """Execute the Stage 5 topic-frequency build."""
    print("\n" + "="*80)
    print("STAGE 5: TOPIC FREQUENCY")
    print("="*80 + "\n")

    if not ADDRESS_TOKENS.exists():
        raise FileNotFoundError(
            f"Token table not found at {ADDRESS_TOKENS}\n"
            f"Please run stage_03_tokenize.py first."
        )

    tokens = pd.read_csv(ADDRESS_TOKENS, keep_default_na=False)
    topic_df, doc_term_df = topic_frequency(tokens)
    by_period = period_frequency(topic_df)

    save_table(topic_df, TOPIC_FREQUENCY)
    save_table(by_period, PERIOD_FREQUENCY)
    if doc_term_df is not None:
        save_pickle(doc_term_df, DOC_TERM_MATRIX)

    print("\n" + "="*80)
    print("SUMMARY")
    print("="*80)
    for period, group in by_period.groupby(PERIOD_COLUMN):
        top = ", ".join(group[TOKEN_COLUMN].head(10))
        print(f"  Top words ({period}): {top}")

    print("\n" + "="*80)
    print("STAGE 5 COMPLETE")
    print("="*80 + "\n")


if __name__ == "__main__":
    main()
