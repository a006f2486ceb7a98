"""Tests for Stage 1 loading and schema checks."""

import pandas as pd
import pytest

from errors import SchemaError, LexiconLoadError
from stage_01_load import load_addresses, load_lexicon, validate_columns, resolve_lexicon_path
from config import LEXICON_SOURCES, REQUIRED_COLUMNS


class TestLoadAddresses:

    def test_loads_all_rows_and_extra_columns(self, corpus_csv, corpus):
        df = load_addresses(corpus_csv)
        assert len(df) == len(corpus)
        assert "title" in df.columns

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_addresses(tmp_path / "nope.csv")

    def test_missing_column_raises_schema_error(self, tmp_path, corpus):
        path = tmp_path / "addresses.csv"
        corpus.drop(columns=["party"]).to_csv(path, index=False)

        with pytest.raises(SchemaError) as excinfo:
            load_addresses(path)
        assert excinfo.value.missing == ["party"]


class TestValidateColumns:

    def test_numeric_text_column_is_wrong_type(self, two_addresses):
        df = two_addresses.assign(president=[1, 2])
        with pytest.raises(SchemaError) as excinfo:
            validate_columns(df, REQUIRED_COLUMNS, "addresses")
        assert excinfo.value.wrong_type == ["president"]

    def test_numeric_date_column_is_wrong_type(self, two_addresses):
        df = two_addresses.assign(date=[1998, 2003])
        with pytest.raises(SchemaError) as excinfo:
            validate_columns(df, REQUIRED_COLUMNS, "addresses")
        assert excinfo.value.wrong_type == ["date"]

    def test_integer_dates_rejected_on_load(self, tmp_path, two_addresses):
        path = tmp_path / "addresses.csv"
        two_addresses.assign(date=[1998, 2003]).to_csv(path, index=False)

        with pytest.raises(SchemaError) as excinfo:
            load_addresses(path)
        assert excinfo.value.wrong_type == ["date"]

    def test_all_missing_column_is_not_a_type_error(self, two_addresses):
        df = two_addresses.assign(party=[float("nan"), float("nan")])
        validate_columns(df, REQUIRED_COLUMNS, "addresses")

    def test_valid_table_passes(self, two_addresses):
        validate_columns(two_addresses, REQUIRED_COLUMNS, "addresses")


class TestLoadLexicon:

    def test_loads_from_path(self, lexicon_csv, lexicon):
        loaded = load_lexicon(str(lexicon_csv))
        assert list(loaded.columns) == ["word", "sentiment"]
        assert len(loaded) == len(lexicon)

    def test_named_source_resolves_to_configured_file(self):
        assert resolve_lexicon_path("bing") == LEXICON_SOURCES["bing"]

    def test_missing_file_raises_lexicon_error(self, tmp_path):
        with pytest.raises(LexiconLoadError, match="file not found"):
            load_lexicon(str(tmp_path / "missing.csv"))

    def test_missing_columns_raises_lexicon_error(self, tmp_path):
        path = tmp_path / "bad.csv"
        pd.DataFrame({"term": ["good"], "score": [1]}).to_csv(path, index=False)

        with pytest.raises(LexiconLoadError):
            load_lexicon(str(path))

    def test_empty_file_raises_lexicon_error(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")

        with pytest.raises(LexiconLoadError):
            load_lexicon(str(path))

    def test_header_only_raises_lexicon_error(self, tmp_path):
        path = tmp_path / "header.csv"
        path.write_text("word,sentiment\n")

        with pytest.raises(LexiconLoadError, match="no word,sentiment entries"):
            load_lexicon(str(path))
