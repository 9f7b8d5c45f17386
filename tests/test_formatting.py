from __future__ import annotations

from lp_batch.batch.formatting import (
    READ_ERROR,
    RESULT_HEADER,
    error_row,
    result_row,
    termination_reason_name,
    to_scientific,
)
from lp_batch.batch.manifest import DatasetEntry
from lp_batch.engine.interfaces import SolveResult, TerminationReason


def _result(**overrides: object) -> SolveResult:
    values: dict[str, object] = dict(
        termination_reason=TerminationReason.OPTIMAL,
        runtime_sec=1.25,
        iterations=1200,
        primal_objective_value=-464.753142857,
        dual_objective_value=-464.7531428571,
        relative_primal_residual=1e-9,
        relative_dual_residual=3e-10,
        absolute_objective_gap=1e-7,
        relative_objective_gap=1e-10,
    )
    values.update(overrides)
    return SolveResult(**values)  # type: ignore[arg-type]


def test_termination_reason_names() -> None:
    assert termination_reason_name(TerminationReason.TIME_LIMIT) == "TIME_LIMIT"
    assert termination_reason_name(int(TerminationReason.FEAS_POLISH_SUCCESS)) == "FEAS_POLISH_SUCCESS"
    assert termination_reason_name(0) == "UNSPECIFIED"
    assert termination_reason_name(99) == "UNKNOWN"
    assert termination_reason_name("weird") == "UNKNOWN"


def test_scientific_format_keeps_17_significant_digits() -> None:
    assert to_scientific(1.0) == "1.0000000000000000e+00"
    assert to_scientific(-0.1) == "-1.0000000000000001e-01"
    text = to_scientific(1.0 / 3.0)
    assert float(text) == 1.0 / 3.0
    mantissa = text.split("e")[0].replace("-", "").replace(".", "")
    assert len(mantissa) == 17


def test_error_row_has_only_identity_and_status() -> None:
    row = error_row(DatasetEntry(path="/data/afiro.mps.gz", line_number=3), READ_ERROR)

    assert len(row) == len(RESULT_HEADER)
    assert row[:3] == ("/data/afiro.mps.gz", "afiro", "READ_ERROR")
    assert all(v == "" for v in row[3:])


def test_result_row_without_polishing_leaves_polish_columns_blank() -> None:
    row = result_row(DatasetEntry(path="/data/afiro.mps", line_number=2), _result())

    assert row[2] == "OPTIMAL"
    assert row[3] == "1.2500000000000000e+00"
    assert row[4] == "1200"
    assert float(row[5]) == -464.753142857
    assert row[11] == ""
    assert row[12] == ""


def test_result_row_with_polishing() -> None:
    row = result_row(
        DatasetEntry(path="/data/afiro.mps", line_number=2),
        _result(
            termination_reason=TerminationReason.FEAS_POLISH_SUCCESS,
            feasibility_polishing_time_sec=0.75,
            feasibility_polishing_iterations=31,
        ),
    )

    assert row[2] == "FEAS_POLISH_SUCCESS"
    assert row[11] == "7.5000000000000000e-01"
    assert row[12] == "31"


def test_unknown_engine_code_is_reported_as_unknown() -> None:
    row = result_row(DatasetEntry(path="x.mps", line_number=2), _result(termination_reason=17))
    assert row[2] == "UNKNOWN"
