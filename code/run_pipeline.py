"""
===============================================================================
FILE: run_pipeline.py
PROJECT: Presidential Address Datasets
===============================================================================
PURPOSE:
    Run Stages 1-6 end to end in memory and write every output dataset
    only once all of them have been built.

DESCRIPTION:
    1. Load addresses (Stage 1)
    2. Annotate, filter, identify and prune (Stage 2)
    3. Tokenize (Stage 3)
    4. Load the lexicon and join sentiment (Stages 1 + 4)
    5. Topic-frequency tables (Stage 5)
    6. Co-occurrence table (Stage 6)
    7. Write all tables and the data dictionary

    Nothing is written if any stage fails. The one exception is a
    lexicon failure: the pre-join token table is then written to the
    diagnostics directory (never to the output directory) so the
    tokenization can still be inspected.

OUTPUT FILES:
    - data/02_cleaned/identified_addresses.csv
    - data/03_features/address_sentiment_tokens.csv
    - data/03_features/address_topic_frequency.csv
    - data/03_features/period_word_frequency.csv
    - data/03_features/period_word_cooccurrence.csv
    - data/03_features/doc_term_matrix.pkl
    - data/03_features/data_dictionary.csv
    - data/99_diagnostics/address_tokens_unjoined.csv (lexicon failure only)

USAGE:
    python code/run_pipeline.py [--addresses PATH] [--lexicon NAME_OR_PATH]
                                [--cutoff-year 2001] [--min-year 1945]
                                [--modality spoken] [--on-malformed raise]
===============================================================================
"""

import argparse
import os
import time
from pathlib import Path
from config import (
    ADDRESSES_FILE, IDENTIFIED_ADDRESSES, SENTIMENT_TOKENS, TOPIC_FREQUENCY,
    PERIOD_FREQUENCY, COOCCURRENCE, DOC_TERM_MATRIX, DATA_DICTIONARY,
    DIAGNOSTIC_TOKENS, SENTIMENT_SCHEMA,
    CUTOFF_YEAR, MIN_YEAR, MODALITY, LEXICON_SOURCE, DATE_POLICY,
    MIN_DOC_FREQ, TOP_N_WORDS,
    save_table, save_pickle
)
from errors import LexiconLoadError
from helper_data_dictionary import build_data_dictionary
from helper_row_counts import RowCounts
from stage_01_load import load_addresses, load_lexicon
from stage_02_prepare import prepare_addresses, DATE_POLICIES
from stage_03_tokenize import unnest_tokens
from stage_04_sentiment import join_sentiment
from stage_05_topics import topic_frequency, period_frequency
from stage_06_cooccurrence import cooccurrence


class PipelineResult:
    """All tables produced by one pipeline run, plus its row counts."""

    def __init__(self, identified, tokens, sentiment, topics, period_words,
                 doc_term, pairs, counts):
        self.identified = identified
        self.tokens = tokens
        self.sentiment = sentiment
        self.topics = topics
        self.period_words = period_words
        self.doc_term = doc_term
        self.pairs = pairs
        self.counts = counts

    @property
    def schema(self):
        """Ordered column names of the final token-sentiment table."""
        return list(SENTIMENT_SCHEMA)


def run_pipeline(addresses, lexicon=None, lexicon_source=LEXICON_SOURCE,
                 cutoff_year=CUTOFF_YEAR, min_year=MIN_YEAR, modality=MODALITY,
                 on_malformed=DATE_POLICY, min_doc_freq=MIN_DOC_FREQ,
                 top_n=TOP_N_WORDS):
    """
    Build every dataset from a loaded address table.

    Args:
        addresses: Raw address table (Stage 1 output)
        lexicon: word,sentiment DataFrame or mapping; when None the
            lexicon is loaded from `lexicon_source`
        lexicon_source: Named source or path, used only if lexicon is None

    Returns:
        PipelineResult

    Raises:
        SchemaError, MalformedDateError, EmptyPopulationError: From Stage 2
        LexiconLoadError: With `tokens` set to the pre-join token table
    """
    counts = RowCounts()
    counts.record("loaded", addresses)

    identified = prepare_addresses(
        addresses, cutoff_year=cutoff_year, min_year=min_year,
        modality=modality, on_malformed=on_malformed, counts=counts
    )

    tokens = unnest_tokens(identified)
    counts.record("tokens", tokens)

    if lexicon is None:
        try:
            lexicon = load_lexicon(lexicon_source)
        except LexiconLoadError as e:
            e.tokens = tokens
            raise

    sentiment = join_sentiment(tokens, lexicon)[list(SENTIMENT_SCHEMA)]
    counts.record("sentiment", sentiment)

    topics, doc_term = topic_frequency(tokens)
    counts.record("topic_frequency", topics)
    period_words = period_frequency(topics)

    pairs = cooccurrence(tokens, min_doc_freq=min_doc_freq, top_n=top_n)
    counts.record("cooccurrence", pairs)

    return PipelineResult(identified, tokens, sentiment, topics, period_words,
                          doc_term, pairs, counts)


def staged_path(path):
    return path.with_name(path.name + ".tmp")


def write_outputs(result):
    """
    Persist every table of a completed run.

    Each table is first written to a ".tmp" file beside its target. The
    targets are replaced only after every table is written; if any write
    fails, the temporary files are removed and no target is touched.
    """
    writes = [
        (save_table, result.identified, IDENTIFIED_ADDRESSES),
        (save_table, result.sentiment, SENTIMENT_TOKENS),
        (save_table, result.topics, TOPIC_FREQUENCY),
        (save_table, result.period_words, PERIOD_FREQUENCY),
        (save_table, result.pairs, COOCCURRENCE),
    ]
    if result.doc_term is not None:
        writes.append((save_pickle, result.doc_term, DOC_TERM_MATRIX))
    writes.append((save_table, build_data_dictionary(), DATA_DICTIONARY))

    staged = []
    try:
        for save, obj, path in writes:
            path = Path(path)
            staged.append((staged_path(path), path))
            save(obj, staged_path(path))
    except Exception:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        raise

    for tmp, path in staged:
        os.replace(tmp, path)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Build the address token datasets.")
    parser.add_argument("--addresses", default=ADDRESSES_FILE,
                        help="CSV with one row per address")
    parser.add_argument("--lexicon", default=LEXICON_SOURCE,
                        help="Named lexicon source or path to a word,sentiment CSV")
    parser.add_argument("--cutoff-year", type=int, default=CUTOFF_YEAR)
    parser.add_argument("--min-year", type=int, default=MIN_YEAR)
    parser.add_argument("--modality", default=MODALITY)
    parser.add_argument("--on-malformed", choices=DATE_POLICIES, default=DATE_POLICY)
    return parser.parse_args(argv)


def main(argv=None):
    """Run the full pipeline and write its outputs."""
    args = parse_args(argv)

    print("\n" + "="*80)
    print("ADDRESS DATASET PIPELINE")
    print("="*80 + "\n")
    print(f"Settings:")
    print(f"  Cutoff year: {args.cutoff_year}")
    print(f"  Min year: {args.min_year}")
    print(f"  Modality: {args.modality}")
    print(f"  Lexicon: {args.lexicon}")
    print(f"  Malformed dates: {args.on_malformed}")
    print()

    start_time = time.time()
    addresses = load_addresses(args.addresses)

    try:
        result = run_pipeline(
            addresses, lexicon_source=args.lexicon,
            cutoff_year=args.cutoff_year, min_year=args.min_year,
            modality=args.modality, on_malformed=args.on_malformed
        )
    except LexiconLoadError as e:
        print(f"\nERROR: {e}")
        if e.tokens is not None:
            print("Writing the unjoined token table for diagnosis...")
            save_table(e.tokens, DIAGNOSTIC_TOKENS)
        raise

    print("\nWriting outputs...")
    write_outputs(result)

    print("\n" + "="*80)
    print("SUMMARY")
    print("="*80)
    result.counts.report()
    print(f"\nTotal execution time: {time.time() - start_time:.1f} seconds")

    print("\n" + "="*80)
    print("PIPELINE COMPLETE")
    print("="*80 + "\n")
    return result


if __name__ == "__main__":
    main()
