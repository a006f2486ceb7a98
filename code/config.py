# config.py
import pandas as pd
from pathlib import Path
import pickle


# ============================================
# BASE PATHS
# ============================================
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# ============================================
# RAW DATA PATHS
# ============================================
RAW_DIR = DATA_DIR / "01_raw"

# Annual addresses, one row per address
ADDRESSES_FILE = RAW_DIR / "addresses.csv"

# Sentiment lexicons (word,sentiment)
LEXICON_DIR = RAW_DIR / "lexicons"
LEXICON_SOURCES = {
    "bing": LEXICON_DIR / "bing.csv",
    "nrc": LEXICON_DIR / "nrc.csv",
    "loughran": LEXICON_DIR / "loughran.csv",
}

# ============================================
# PROCESSED DATA PATHS
# ============================================
CLEANED_DIR = DATA_DIR / "02_cleaned"
FEATURES_DIR = DATA_DIR / "03_features"
DIAGNOSTICS_DIR = DATA_DIR / "99_diagnostics"

# Identified addresses (before tokenization)
IDENTIFIED_ADDRESSES = CLEANED_DIR / "identified_addresses.csv"

# One row per (address, token), before the lexicon join
ADDRESS_TOKENS = CLEANED_DIR / "address_tokens.csv"

# Final datasets
SENTIMENT_TOKENS = FEATURES_DIR / "address_sentiment_tokens.csv"
TOPIC_FREQUENCY = FEATURES_DIR / "address_topic_frequency.csv"
PERIOD_FREQUENCY = FEATURES_DIR / "period_word_frequency.csv"
COOCCURRENCE = FEATURES_DIR / "period_word_cooccurrence.csv"
DOC_TERM_MATRIX = FEATURES_DIR / "doc_term_matrix.pkl"
DATA_DICTIONARY = FEATURES_DIR / "data_dictionary.csv"

# Written only when the lexicon cannot be loaded
DIAGNOSTIC_TOKENS = DIAGNOSTICS_DIR / "address_tokens_unjoined.csv"

# ============================================
# DATA COLUMN NAMES
# ============================================
DATE_COLUMN = "date"
TEXT_COLUMN = "text"
DELIVERY_COLUMN = "delivery"
YEAR_COLUMN = "address_year"
PERIOD_COLUMN = "period"
ADDRESS_ID_COLUMN = "address_id"
TOKEN_COLUMN = "token"
TOKEN_ID_COLUMN = "token_id"
SENTIMENT_COLUMN = "sentiment"
LEXICON_WORD_COLUMN = "word"

REQUIRED_COLUMNS = [DATE_COLUMN, TEXT_COLUMN, "president", "party", DELIVERY_COLUMN]
LEXICON_COLUMNS = [LEXICON_WORD_COLUMN, SENTIMENT_COLUMN]

# Columns carried into tokenization, in output order
METADATA_COLUMNS = [ADDRESS_ID_COLUMN, YEAR_COLUMN, "president", "party", PERIOD_COLUMN]
PRE_TOKEN_COLUMNS = METADATA_COLUMNS + [TEXT_COLUMN]

PRE_PERIOD = "pre"
POST_PERIOD = "post"

# ============================================
# PIPELINE PARAMETERS
# ============================================
# Addresses dated in this year or later are "post"
CUTOFF_YEAR = 2001

# Lower bound of the analysis window (inclusive)
MIN_YEAR = 1945

# Delivery modality kept by the population filter
MODALITY = "spoken"

# Key in LEXICON_SOURCES, or a path to a word,sentiment CSV
LEXICON_SOURCE = "bing"

# "raise" aborts on an unparseable date, "drop" rejects those rows
DATE_POLICY = "raise"

# ============================================
# TEXT PARAMETERS
# ============================================
# Remove stopwords from the topic and co-occurrence tables?
REMOVE_STOPWORDS = True

# Keep only alphabetic tokens in the topic and co-occurrence tables?
ALPHA_ONLY = True

# Co-occurrence vocabulary: words in at least MIN_DOC_FREQ addresses,
# capped at the TOP_N_WORDS most frequent per period
MIN_DOC_FREQ = 2
TOP_N_WORDS = 300

# spaCy batch size for nlp.pipe
BATCH_SIZE = 50

# ============================================
# OUTPUT SCHEMAS
# ============================================
SENTIMENT_SCHEMA = {
    "address_id": ("int", "Dense 1..N address identifier, date-ascending order"),
    "address_year": ("int", "Calendar year the address was delivered"),
    "president": ("string", "President delivering the address"),
    "party": ("string", "Party of the president"),
    "period": ("string", "'pre' if address_year < cutoff year, else 'post'"),
    "token": ("string", "Lowercased word token"),
    "token_id": ("int", "1-based position of the token within its address"),
    "sentiment": ("string", "Lexicon sentiment class; empty when the word is not in the lexicon"),
}

TOPIC_SCHEMA = {
    "address_id": ("int", "Dense 1..N address identifier"),
    "address_year": ("int", "Calendar year the address was delivered"),
    "president": ("string", "President delivering the address"),
    "party": ("string", "Party of the president"),
    "period": ("string", "'pre' or 'post'"),
    "token": ("string", "Lowercased word, stop words removed"),
    "n": ("int", "Occurrences of the word in the address"),
    "tf_idf": ("float", "tf-idf weight of the word in the address"),
}

PERIOD_FREQUENCY_SCHEMA = {
    "period": ("string", "'pre' or 'post'"),
    "token": ("string", "Lowercased word, stop words removed"),
    "n": ("int", "Occurrences of the word across the period"),
    "share": ("float", "n divided by all word occurrences in the period"),
}

COOCCURRENCE_SCHEMA = {
    "period": ("string", "'pre' or 'post'"),
    "item1": ("string", "First word of the pair (alphabetically)"),
    "item2": ("string", "Second word of the pair"),
    "n": ("int", "Number of addresses in the period containing both words"),
}

OUTPUT_SCHEMAS = {
    SENTIMENT_TOKENS.name: SENTIMENT_SCHEMA,
    TOPIC_FREQUENCY.name: TOPIC_SCHEMA,
    PERIOD_FREQUENCY.name: PERIOD_FREQUENCY_SCHEMA,
    COOCCURRENCE.name: COOCCURRENCE_SCHEMA,
}


def save_table(df, filepath):
    """Save DataFrame to CSV, creating the parent directory"""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(filepath, index=False)
    print(f"Saved {len(df):,} rows to {filepath}")


def save_pickle(obj, filepath):
    """Save object to pickle file"""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, 'wb') as f:
        pickle.dump(obj, f)
    print(f"Saved to {filepath}")

def create_sparse_dataframe(X, index, feature_names):
    """Create sparse DataFrame from scipy sparse matrix"""
    return pd.DataFrame.sparse.from_spmatrix(
        X,
        index=index,
        columns=feature_names
    )
