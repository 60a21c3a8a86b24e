"""Tests for result schemas and aggregate bookkeeping."""

import pytest
from pydantic import ValidationError

from loopbench.schemas import (
    IssueType,
    IterationRecord,
    ModelAggregate,
    ProgressSnapshot,
    RunPhase,
    TestResult,
    TokenUsage,
    ValidationIssue,
    ValidationResult,
)


def _issue(issue_type: IssueType = IssueType.SYNTAX_ERROR) -> ValidationIssue:
    return ValidationIssue(type=issue_type, message="bad", fix="fix it")


def _make_result(
    passed: bool = True,
    iterations: int = 1,
    success: bool = True,
    tokens: TokenUsage = TokenUsage(prompt=10, completion=20, reasoning=5),
    duration_ms: int = 1000,
) -> TestResult:
    if not success:
        validation = ValidationResult.from_errors([_issue(IssueType.GENERATION_FAILED)])
        return TestResult(
            success=False,
            validation=validation,
            iterations=iterations,
            duration_ms=duration_ms,
            token_usage=tokens,
            error="HTTP 500",
        )
    validation = ValidationResult.from_errors([] if passed else [_issue()])
    return TestResult(
        success=True,
        validation=validation,
        iterations=iterations,
        duration_ms=duration_ms,
        passed_after_loop=passed,
        token_usage=tokens,
    )


class TestTokenUsage:
    def test_addition_sums_each_field(self) -> None:
        total = TokenUsage(prompt=1, completion=2, reasoning=3) + TokenUsage(prompt=10, completion=20, reasoning=30)

        assert (total.prompt, total.completion, total.reasoning) == (11, 22, 33)
        assert total.total == 33

    def test_negative_counts_are_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TokenUsage(prompt=-1)


class TestValidationResult:
    def test_valid_must_match_errors(self) -> None:
        with pytest.raises(ValidationError):
            ValidationResult(valid=True, errors=[_issue()])
        with pytest.raises(ValidationError):
            ValidationResult(valid=False, errors=[])

    def test_from_errors(self) -> None:
        result = ValidationResult.from_errors([_issue(IssueType.MISMATCHED_TAGS)], {"x": False})

        assert result.valid is False
        assert result.error_types == ["MISMATCHED_TAGS"]
        assert result.checks == {"x": False}


class TestTestResultConsistency:
    def test_successful_result_must_agree_with_validation(self) -> None:
        with pytest.raises(ValidationError):
            TestResult(
                success=True,
                validation=ValidationResult.from_errors([]),
                iterations=1,
                passed_after_loop=False,
            )

    def test_failed_result_requires_error_message(self) -> None:
        with pytest.raises(ValidationError):
            TestResult(
                success=False,
                validation=ValidationResult.from_errors([_issue(IssueType.GENERATION_FAILED)]),
                iterations=1,
            )

    def test_iterations_start_at_one(self) -> None:
        with pytest.raises(ValidationError):
            _make_result(iterations=0)

    def test_passed_first_try(self) -> None:
        assert _make_result(iterations=1).passed_first_try is True
        assert _make_result(iterations=2).passed_first_try is False
        assert _make_result(passed=False, iterations=3).passed_first_try is False

    def test_iteration_record_is_frozen(self) -> None:
        record = IterationRecord(iteration=1, valid=True)

        with pytest.raises(ValidationError):
            record.valid = False


class TestModelAggregate:
    def test_each_result_increments_exactly_one_counter(self) -> None:
        aggregate = ModelAggregate(model_id="gpt-4.1", name="GPT-4.1")

        aggregate.record(_make_result(iterations=1))
        aggregate.record(_make_result(iterations=3))
        aggregate.record(_make_result(passed=False, iterations=3))
        aggregate.record(_make_result(success=False, iterations=1))

        assert aggregate.passed_first_try == 1
        assert aggregate.passed_after_loop == 1
        assert aggregate.total_failed == 2
        assert aggregate.total_tests == 4
        assert aggregate.total_iterations == 8
        assert aggregate.total_duration_ms == 4000
        assert aggregate.total_tokens == TokenUsage(prompt=40, completion=80, reasoning=20)
        assert len(aggregate.tests) == 4

    def test_rates(self) -> None:
        aggregate = ModelAggregate(model_id="m", name="M")
        for result in [_make_result(), _make_result(iterations=2), _make_result(passed=False, iterations=3), _make_result()]:
            aggregate.record(result)

        assert aggregate.first_try_rate == 0.5
        assert aggregate.loop_success_rate == 0.75
        assert aggregate.average_iterations == 1.75
        assert aggregate.average_duration_ms == 1000

    def test_empty_aggregate_rates_are_zero(self) -> None:
        aggregate = ModelAggregate(model_id="m", name="M")

        assert aggregate.first_try_rate == 0.0
        assert aggregate.loop_success_rate == 0.0
        assert aggregate.average_iterations == 0.0

    def test_results_can_be_discarded(self) -> None:
        aggregate = ModelAggregate(model_id="m", name="M")

        aggregate.record(_make_result(), retain=False)

        assert aggregate.tests == []
        assert aggregate.passed_first_try == 1

    def test_total_tests_is_serialised(self) -> None:
        aggregate = ModelAggregate(model_id="m", name="M")
        aggregate.record(_make_result())

        assert aggregate.model_dump()["total_tests"] == 1


class TestProgressSnapshot:
    def test_percent(self) -> None:
        snapshot = ProgressSnapshot(phase=RunPhase.RUNNING, total_pairs=8, completed_pairs=2)

        assert snapshot.percent == 25.0

    def test_percent_without_pairs(self) -> None:
        assert ProgressSnapshot().percent == 0.0

    def test_snapshot_is_immutable(self) -> None:
        snapshot = ProgressSnapshot()

        with pytest.raises(ValidationError):
            snapshot.completed_pairs = 3
