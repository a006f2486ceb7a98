"""End-to-end tests for run_pipeline and the data dictionary."""

import pandas as pd
import pytest

import run_pipeline as pipeline
from config import SENTIMENT_SCHEMA, OUTPUT_SCHEMAS
from errors import EmptyPopulationError, LexiconLoadError, MalformedDateError
from helper_data_dictionary import build_data_dictionary


class TestRunPipeline:

    def test_two_address_scenario(self, two_addresses, lexicon):
        result = pipeline.run_pipeline(two_addresses, lexicon=lexicon)
        table = result.sentiment

        assert list(table.columns) == list(SENTIMENT_SCHEMA)
        assert result.schema == list(SENTIMENT_SCHEMA)

        doc_a = table[table["address_id"] == 1]
        assert doc_a["period"].unique().tolist() == ["pre"]
        assert doc_a["address_year"].unique().tolist() == [1998]
        assert doc_a["token"].tolist() == ["the", "economy", "is", "strong"]
        assert doc_a["token_id"].tolist() == [1, 2, 3, 4]
        assert doc_a["sentiment"].iloc[3] == "positive"
        assert pd.isna(doc_a["sentiment"].iloc[0])

        doc_b = table[table["address_id"] == 2]
        assert doc_b["period"].unique().tolist() == ["post"]

    def test_row_counts_observable(self, corpus, lexicon):
        result = pipeline.run_pipeline(corpus, lexicon=lexicon, min_doc_freq=1)
        counts = result.counts

        assert counts["loaded"] == 6
        assert counts["filtered"] == 4
        assert counts["identified"] == len(result.identified) == 4
        assert counts["tokens"] == counts["sentiment"] == len(result.tokens)

    def test_configuration_is_passed_through(self, corpus, lexicon):
        result = pipeline.run_pipeline(
            corpus, lexicon=lexicon, cutoff_year=1990, min_year=1950, min_doc_freq=1
        )
        assert result.identified["address_year"].tolist() == [1998, 2001, 2003]
        assert set(result.identified["period"]) == {"post"}

    def test_loads_named_lexicon_source(self, corpus, lexicon_csv):
        result = pipeline.run_pipeline(corpus, lexicon_source=str(lexicon_csv), min_doc_freq=1)
        assert result.sentiment["sentiment"].notna().any()

    def test_lexicon_failure_carries_token_table(self, corpus, tmp_path):
        with pytest.raises(LexiconLoadError) as excinfo:
            pipeline.run_pipeline(corpus, lexicon_source=str(tmp_path / "missing.csv"))

        tokens = excinfo.value.tokens
        assert tokens is not None
        assert "sentiment" not in tokens.columns
        assert set(tokens["address_id"]) == {1, 2, 4}

    def test_empty_population(self, corpus, lexicon):
        with pytest.raises(EmptyPopulationError):
            pipeline.run_pipeline(corpus, lexicon=lexicon, modality="televised")

    def test_malformed_date_aborts(self, corpus, lexicon):
        corpus.loc[0, "date"] = "sometime"
        with pytest.raises(MalformedDateError):
            pipeline.run_pipeline(corpus, lexicon=lexicon)


@pytest.fixture
def output_paths(tmp_path, monkeypatch):
    """Redirect every output path of run_pipeline into tmp_path."""
    names = [
        "IDENTIFIED_ADDRESSES", "SENTIMENT_TOKENS", "TOPIC_FREQUENCY",
        "PERIOD_FREQUENCY", "COOCCURRENCE", "DOC_TERM_MATRIX",
        "DATA_DICTIONARY", "DIAGNOSTIC_TOKENS",
    ]
    paths = {}
    for name in names:
        path = tmp_path / "out" / f"{name.lower()}.out"
        monkeypatch.setattr(pipeline, name, path)
        paths[name] = path
    return paths


class TestMain:

    def test_writes_every_output(self, corpus_csv, lexicon_csv, output_paths):
        pipeline.main(["--addresses", str(corpus_csv), "--lexicon", str(lexicon_csv)])

        for name, path in output_paths.items():
            if name == "DIAGNOSTIC_TOKENS":
                assert not path.exists()
            else:
                assert path.exists(), name

        written = pd.read_csv(output_paths["SENTIMENT_TOKENS"])
        assert list(written.columns) == list(SENTIMENT_SCHEMA)

    def test_lexicon_failure_writes_only_diagnostics(self, corpus_csv, tmp_path, output_paths, capsys):
        with pytest.raises(LexiconLoadError):
            pipeline.main(["--addresses", str(corpus_csv),
                           "--lexicon", str(tmp_path / "missing.csv")])

        assert "ERROR: " in capsys.readouterr().out

        assert output_paths["DIAGNOSTIC_TOKENS"].exists()
        for name, path in output_paths.items():
            if name != "DIAGNOSTIC_TOKENS":
                assert not path.exists(), name

    def test_filter_failure_writes_nothing(self, corpus_csv, lexicon_csv, output_paths):
        with pytest.raises(EmptyPopulationError):
            pipeline.main(["--addresses", str(corpus_csv), "--lexicon", str(lexicon_csv),
                           "--min-year", "2100"])

        assert not any(path.exists() for path in output_paths.values())

    def test_failed_write_leaves_no_outputs(self, corpus_csv, lexicon_csv, output_paths, monkeypatch):
        def fail(obj, filepath):
            raise OSError("disk full")

        monkeypatch.setattr(pipeline, "save_pickle", fail)
        with pytest.raises(OSError, match="disk full"):
            pipeline.main(["--addresses", str(corpus_csv), "--lexicon", str(lexicon_csv)])

        out_dir = output_paths["SENTIMENT_TOKENS"].parent
        assert not any(path.exists() for path in output_paths.values())
        assert not list(out_dir.glob("*.tmp"))


class TestDataDictionary:

    def test_one_row_per_output_column(self):
        dictionary = build_data_dictionary()
        expected = sum(len(schema) for schema in OUTPUT_SCHEMAS.values())
        assert len(dictionary) == expected
        assert list(dictionary.columns) == ["table", "column", "dtype", "description"]

    def test_sentiment_table_columns_in_order(self):
        dictionary = build_data_dictionary()
        sentiment = dictionary[dictionary["table"] == "address_sentiment_tokens.csv"]
        assert sentiment["column"].tolist() == list(SENTIMENT_SCHEMA)
