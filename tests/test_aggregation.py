"""Tests for folding run results into case results."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from railreport.aggregation import aggregate
from railreport.core.models import CaseResult, Status
from tests.factories import make_run_result


def run_results() -> st.SearchStrategy:
    """Strategy for lists of reportable run results over a small id space."""
    return st.lists(
        st.builds(
            make_run_result,
            test_name=st.sampled_from(["t1", "t2", "t3"]),
            case_ids=st.frozensets(st.sampled_from(["1", "2", "3"]), min_size=1, max_size=3),
            elapsed=st.integers(min_value=0, max_value=500),
            status=st.sampled_from([Status.PASSED, Status.FAILED]),
            comment=st.sampled_from(["", "boom", "timeout\n  at line 3"]),
        ),
        max_size=12,
    )


class TestAggregate:
    """Tests for aggregate."""

    def test_empty_input(self):
        assert aggregate([]) == {}

    def test_single_pass(self):
        results = aggregate([make_run_result(case_ids=("100",), elapsed=4)])

        assert results == {
            "100": CaseResult(case_id="100", status=Status.PASSED, elapsed_seconds=4, comment="")
        }

    def test_fan_out(self):
        """One run result with two ids feeds two independent case results."""
        run = make_run_result(
            test_name="t", case_ids=("1", "2"), elapsed=5, status=Status.FAILED, comment="boom"
        )

        results = aggregate([run])

        assert set(results) == {"1", "2"}
        for case_id in ("1", "2"):
            assert results[case_id].elapsed_seconds == 5
            assert results[case_id].status is Status.FAILED
            assert results[case_id].comment == "t: boom\n"

    def test_fan_in(self):
        """Two run results on one id sum elapsed and take the worst status."""
        results = aggregate(
            [
                make_run_result(test_name="a", case_ids=("9",), elapsed=2),
                make_run_result(
                    test_name="b",
                    case_ids=("9",),
                    elapsed=3,
                    status=Status.FAILED,
                    comment="nope",
                ),
            ]
        )

        assert results["9"] == CaseResult(
            case_id="9", status=Status.FAILED, elapsed_seconds=5, comment="b: nope\n"
        )

    def test_passes_do_not_hide_a_failure(self):
        """Any failure marks the case failed whatever comes after it."""
        results = aggregate(
            [
                make_run_result(case_ids=("1",), status=Status.FAILED),
                make_run_result(case_ids=("1",), status=Status.PASSED),
            ]
        )

        assert results["1"].status is Status.FAILED

    def test_only_non_empty_comments_are_appended(self):
        results = aggregate(
            [
                make_run_result(test_name="quiet", case_ids=("1",)),
                make_run_result(test_name="loud", case_ids=("1",), comment="x"),
            ]
        )

        assert results["1"].comment == "loud: x\n"

    def test_skipped_and_unmapped_are_dropped(self):
        results = aggregate(
            [
                make_run_result(case_ids=("1",), status=None),
                make_run_result(case_ids=()),
                make_run_result(case_ids=("2",)),
            ]
        )

        assert set(results) == {"2"}

    def test_accepts_a_generator(self):
        """Aggregation consumes any iterable once."""
        results = aggregate(make_run_result(case_ids=(str(i),)) for i in range(3))

        assert set(results) == {"0", "1", "2"}

    @given(run_results(), st.randoms())
    def test_order_independent(self, runs, random):
        """Shuffling the input yields the same case results."""
        shuffled = list(runs)
        random.shuffle(shuffled)

        assert aggregate(shuffled) == aggregate(runs)

    @given(run_results())
    def test_totals_match_contributions(self, runs):
        """Each case sums exactly the elapsed times that map to it."""
        results = aggregate(runs)

        for case_id, result in results.items():
            contributing = [r for r in runs if case_id in r.case_ids]
            assert result.elapsed_seconds == sum(r.elapsed for r in contributing)
            assert result.status == max(r.status for r in contributing)


class TestCaseResultPayload:
    """Tests for the TestRail body entry."""

    def test_payload(self):
        result = CaseResult(case_id="100", status=Status.FAILED, elapsed_seconds=1, comment="c")

        assert result.to_payload() == {
            "case_id": "100",
            "status_id": 5,
            "comment": "c",
            "elapsed": "1s",
        }

    def test_zero_elapsed_is_omitted(self):
        assert "elapsed" not in CaseResult(case_id="1").to_payload()
