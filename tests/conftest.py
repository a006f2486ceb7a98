"""
Shared pytest fixtures for the address dataset pipeline tests.

The pipeline stages live as flat modules under code/, so that directory
is put on sys.path here and the tests import them by module name.
"""

import sys
from pathlib import Path

import pandas as pd
import pytest

# Ensure code/ is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "code"))


# ===========================
# Address Fixtures
# ===========================

@pytest.fixture
def two_addresses() -> pd.DataFrame:
    """One address before the cutoff, one after."""
    return pd.DataFrame({
        "date": ["1998-01-27", "2003-01-28"],
        "text": ["The economy is strong", "We face new threats"],
        "president": ["Clinton", "Bush"],
        "party": ["Democratic", "Republican"],
        "delivery": ["spoken", "spoken"],
    })


@pytest.fixture
def corpus() -> pd.DataFrame:
    """
    Addresses out of date order, with rows the population filter drops
    and one spoken address with empty text.
    """
    return pd.DataFrame({
        "date": [
            "2003-01-28", "1940-01-03", "1998-01-27",
            "1978-01-19", "2001-02-27", "1946-01-21",
        ],
        "text": [
            "We face new threats. Our economy is strong!",
            "An old address before the window.",
            "The economy is strong, and jobs are growing.",
            "A written message to the Congress.",
            "",
            "Peace is won; the economy must grow.",
        ],
        "president": ["Bush", "Roosevelt", "Clinton", "Carter", "Bush", "Truman"],
        "party": ["Republican", "Democratic", "Democratic", "Democratic",
                  "Republican", "Democratic"],
        "delivery": ["spoken", "spoken", "spoken", "written", "spoken", "spoken"],
        "title": ["SOTU", "SOTU", "SOTU", "SOTU", "Joint Session", "SOTU"],
    })


# ===========================
# Lexicon Fixtures
# ===========================

@pytest.fixture
def lexicon() -> pd.DataFrame:
    return pd.DataFrame({
        "word": ["strong", "threats", "peace", "growing"],
        "sentiment": ["positive", "negative", "positive", "positive"],
    })


@pytest.fixture
def lexicon_csv(tmp_path, lexicon) -> Path:
    path = tmp_path / "lexicon.csv"
    lexicon.to_csv(path, index=False)
    return path


@pytest.fixture
def corpus_csv(tmp_path, corpus) -> Path:
    path = tmp_path / "addresses.csv"
    corpus.to_csv(path, index=False)
    return path
