from __future__ import annotations

from pathlib import Path

from lp_batch.batch.checkpointing import ResultsCheckpoint


def test_missing_file_yields_empty_checkpoint(tmp_path: Path) -> None:
    ck = ResultsCheckpoint.load(tmp_path / "results.csv")

    assert ck.processed == set()
    assert not ck.has_content


def test_empty_file_has_no_content(tmp_path: Path) -> None:
    path = tmp_path / "results.csv"
    path.write_text("")

    ck = ResultsCheckpoint.load(path)
    assert ck.processed == set()
    assert not ck.has_content


def test_header_match_selects_key_column_anywhere(tmp_path: Path) -> None:
    path = tmp_path / "results.csv"
    path.write_text(
        "instance, dataset ,termination_reason\n"
        "a,/data/a.mps,OPTIMAL\n"
        "\n"
        "b,  /data/b.mps  ,READ_ERROR\n"
        "c,,OPTIMAL\n"
        "short\n"
    )

    ck = ResultsCheckpoint.load(path)

    assert ck.processed == {"/data/a.mps", "/data/b.mps"}
    assert ck.has_content


def test_without_header_first_row_counts_as_data(tmp_path: Path) -> None:
    path = tmp_path / "results.csv"
    path.write_text("Dataset,instance\n/data/a.mps,a\n")

    ck = ResultsCheckpoint.load(path)

    # 'Dataset' is not an exact match, so the row is read as data.
    assert ck.processed == {"Dataset", "/data/a.mps"}


def test_leading_blank_lines_do_not_hide_header(tmp_path: Path) -> None:
    path = tmp_path / "results.csv"
    path.write_text("\n\ndataset,instance\n/data/a.mps,a\n")

    ck = ResultsCheckpoint.load(path)
    assert ck.processed == {"/data/a.mps"}


def test_quoted_keys_are_decoded(tmp_path: Path) -> None:
    path = tmp_path / "results.csv"
    path.write_text('dataset,instance\n"/data/a,b.mps",a\n')

    ck = ResultsCheckpoint.load(path)
    assert ck.is_processed("/data/a,b.mps")


def test_custom_key_column(tmp_path: Path) -> None:
    path = tmp_path / "results.csv"
    path.write_text("instance,path\na,/x/a.mps\n")

    ck = ResultsCheckpoint.load(path, key_column="path")
    assert ck.processed == {"/x/a.mps"}


def test_mark_processed_grows_in_memory_only(tmp_path: Path) -> None:
    path = tmp_path / "results.csv"
    path.write_text("dataset\n/data/a.mps\n")

    ck = ResultsCheckpoint.load(path)
    ck.mark_processed("/data/b.mps")

    assert ck.is_processed("/data/b.mps")
    assert path.read_text() == "dataset\n/data/a.mps\n"
