"""
Unit tests for template_eval.utils.parallel module.
"""

from template_eval.utils.parallel import execute_parallel
from template_eval.utils.stats import ExecutionStats


class TestExecuteParallel:
    """Test execute_parallel function."""

    def test_basic_execution(self):
        """Every item comes back with its result."""
        items = [1, 2, 3, 4, 5]

        def square(x: int) -> int:
            return x * x

        results = execute_parallel(items, square, max_workers=2, show_progress=False)

        assert len(results) == 5
        for item, result, error in results:
            assert error is None
            assert result == item * item

    def test_error_handling(self):
        """A failing item is reported, not raised."""
        items = [1, 2, 3]
        errors_caught = []

        def fail_on_2(x: int) -> int:
            if x == 2:
                raise ValueError(f"Failed on {x}")
            return x * x

        results = execute_parallel(
            items,
            fail_on_2,
            max_workers=2,
            show_progress=False,
            error_handler=lambda item, error: errors_caught.append((item, error)),
        )

        assert len(results) == 3
        assert len(errors_caught) == 1
        assert errors_caught[0][0] == 2

        for item, result, error in results:
            if item == 2:
                assert isinstance(error, ValueError)
                assert result is None
            else:
                assert error is None
                assert result == item * item

    def test_stats_tracking(self):
        """Successes and failures are counted."""
        stats = ExecutionStats(points=0, failed=0)

        def fail_on_odd(x: int) -> int:
            if x % 2:
                raise RuntimeError("odd")
            return x

        execute_parallel(
            range(6),
            fail_on_odd,
            max_workers=3,
            show_progress=False,
            stats=stats,
            stats_key="points",
        )

        assert stats.get("points") == 3
        assert stats.get("failed") == 3

    def test_empty_items(self):
        """Nothing to do returns an empty list."""
        assert execute_parallel([], lambda x: x, show_progress=False) == []

    def test_with_progress_bar(self):
        """The tqdm bar does not change results."""
        results = execute_parallel([1, 2], lambda x: -x, max_workers=2, show_progress=True)
        assert sorted(result for _, result, _ in results) == [-2, -1]
