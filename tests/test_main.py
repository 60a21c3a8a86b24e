"""Tests for CLI argument parsing and model selection."""

import pytest

from loopbench.schemas import DEFAULT_MODELS, ModelsRegistry
from main import build_parser, select_models


def _parse(*argv: str):
    return build_parser().parse_args(list(argv))


class TestParser:
    def test_run_defaults(self) -> None:
        args = _parse("run")

        assert args.command == "run"
        assert args.models is None
        assert args.max_iterations is None
        assert args.export is None

    def test_export_without_path_uses_empty_marker(self) -> None:
        assert _parse("run", "--export").export == ""
        assert _parse("run", "--export", "out.json").export == "out.json"

    def test_selection_flags_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            _parse("run", "-m", "gpt-4.1", "--tier", "pro")


class TestSelectModels:
    def test_explicit_ids_keep_registry_order_and_skip_unknown(self, capsys) -> None:
        registry = ModelsRegistry(models=list(DEFAULT_MODELS))

        models = select_models(registry, _parse("run", "-m", "o3-mini", "gpt-4.1", "nope"))

        assert [m.id for m in models] == ["gpt-4.1", "o3-mini"]
        assert "nope" in capsys.readouterr().out

    def test_tier_picks_one_model(self) -> None:
        registry = ModelsRegistry(models=list(DEFAULT_MODELS))

        models = select_models(registry, _parse("run", "--tier", "lite"))

        assert [m.id for m in models] == ["gpt-4o-mini"]

    def test_filter_and_default(self) -> None:
        registry = ModelsRegistry(models=list(DEFAULT_MODELS))

        assert all("mini" in m.id for m in select_models(registry, _parse("run", "--filter", "mini")))
        assert len(select_models(registry, _parse("run"))) == len(DEFAULT_MODELS)


class TestMaxIterations:
    @pytest.mark.parametrize("value", ["0", "-2", "three"])
    def test_max_iterations_must_be_positive(self, value: str, capsys) -> None:
        with pytest.raises(SystemExit) as excinfo:
            _parse("run", "-i", value)

        assert excinfo.value.code == 2
        assert "--max-iterations" in capsys.readouterr().err

    def test_max_iterations_accepts_positive(self) -> None:
        assert _parse("run", "-i", "5").max_iterations == 5
