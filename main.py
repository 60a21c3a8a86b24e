"""
LoopBench CLI
Entry point: прогон бенчмарка и справочная информация.

Примеры:
    # Прогон
    python main.py run
    python main.py run -m gpt-4.1 o3-mini -i 5
    python main.py run --tier lite --export
    python main.py run --filter "4\\.1" -s navigation --export results/nav.json

    # Информация
    python main.py info --models
    python main.py info --suites
"""

import argparse
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
load_dotenv()

from loopbench.clients import BenchmarkCancelledError, NoModelsAvailableError, OpenAIGateway
from loopbench.config import Settings, get_model_by_tier, load_settings, setup_logging
from loopbench.core import (
    BenchmarkRunner,
    CancellationToken,
    CompositeObserver,
    ConsoleObserver,
    FixLoop,
    LoggingObserver,
    export_results,
    print_analysis,
    print_availability,
    print_loop_effectiveness,
    print_summary,
    print_test_details,
)
from loopbench.schemas import BenchmarkRun, ModelConfig, ModelsRegistry, TestSuitesFile
from loopbench.utils import print_kv, print_section, print_table_header, print_table_row

logger = logging.getLogger("loopbench.cli")


# =============================================================================
# Выбор моделей и тестов
# =============================================================================

def select_models(registry: ModelsRegistry, args) -> List[ModelConfig]:
    """
    Модели для прогона согласно аргументам

    Приоритет: -m > --tier > --filter > весь реестр
    """
    if args.models:
        models = registry.select(args.models)
        unknown = set(args.models) - {m.id for m in models}
        for model_id in sorted(unknown):
            logger.warning(f"Модель '{model_id}' не найдена в реестре")
            print(f"  Модель '{model_id}' не найдена в реестре, пропущена")
        return models

    if args.tier:
        tier = get_model_by_tier(args.tier)
        model = registry.get(tier["id"]) or ModelConfig(name=tier["name"], id=tier["id"])
        return [model]

    if args.filter:
        return registry.filter(args.filter)

    return list(registry)


def positive_int(value: str) -> int:
    """Тип argparse: целое число >= 1"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"ожидалось целое число, получено '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"должно быть >= 1, получено {number}")
    return number


def _install_sigint_handler(token: CancellationToken) -> None:
    """Первый Ctrl+C — мягкая остановка, второй — немедленное прерывание"""

    def handler(signum, frame):
        if token.cancelled:
            signal.signal(signal.SIGINT, signal.default_int_handler)
            raise KeyboardInterrupt
        token.cancel()
        print("\n  Остановка после текущей пары... (повторный Ctrl+C прервёт немедленно)")

    signal.signal(signal.SIGINT, handler)


def _export_path(settings: Settings, value: str) -> Path:
    if value:
        return Path(value)
    filename = f"benchmark_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
    return Path(settings.paths.results_dir) / filename


def _print_report(run: BenchmarkRun) -> None:
    print_availability(run.available, run.unavailable)
    print_summary(run)
    print_analysis(run)
    print_loop_effectiveness(run)
    print_test_details(run)


# =============================================================================
# Команды
# =============================================================================

def cmd_run(args, settings: Settings) -> int:
    """Запустить бенчмарк"""
    registry = ModelsRegistry.from_yaml(settings.paths.get_models_path())
    suites = TestSuitesFile.from_yaml(settings.paths.get_suites_path())

    suite_name = args.suite or settings.benchmark.default_suite
    try:
        test_cases = suites.get_cases(suite_name)
    except KeyError:
        print(f"Ошибка: набор тестов '{suite_name}' не найден "
              f"(доступны: {', '.join(suites.suite_names)}, all)")
        return 2

    models = select_models(registry, args)
    if not models:
        print("Ошибка: не выбрано ни одной модели")
        return 2

    print_section("LoopBench")
    print_kv("Модели", ", ".join(m.name for m in models))
    print_kv("Набор", f"{suite_name} ({len(test_cases)} тестов)")
    print_kv("Итераций", str(settings.loop.max_iterations))

    observer = CompositeObserver([LoggingObserver(), ConsoleObserver()])
    try:
        gateway = OpenAIGateway.from_settings(settings)
    except ValueError as e:
        print(f"Ошибка: {e}")
        return 2
    fix_loop = FixLoop.from_settings(settings, gateway, observer)
    runner = BenchmarkRunner.from_settings(settings, gateway, fix_loop, observer)

    token = CancellationToken()
    _install_sigint_handler(token)

    exit_code = 0
    try:
        run = runner.run(models, test_cases, cancel_token=token)
    except NoModelsAvailableError as e:
        print()
        print("Ошибка: ни одна модель не доступна")
        for item in e.unavailable:
            print(f"  - {item.model.name}: {item.reason}")
        return 1
    except BenchmarkCancelledError as e:
        run = e.run
        exit_code = 130
        if run is None or not run.aggregates:
            print("\n  Прогон отменён до начала тестов")
            return exit_code
    finally:
        signal.signal(signal.SIGINT, signal.default_int_handler)

    _print_report(run)

    if args.export is not None:
        path = export_results(run, _export_path(settings, args.export))
        print(f"  Результаты сохранены: {path}")
        logger.info(f"Результаты сохранены: {path}")

    return exit_code


def cmd_info(args, settings: Settings) -> int:
    """Показать реестр моделей и наборы тестов"""
    if args.models:
        registry = ModelsRegistry.from_yaml(settings.paths.get_models_path())
        print_section("Модели")
        columns = (("ID", 22), ("Название", 18), ("Класс", 14), ("Протокол", 11), ("Таймаут", 8))
        print_table_header(*columns)
        for model in registry:
            policy = model.policy
            print_table_row(
                (model.id, 22),
                (model.name, 18),
                (policy.model_class.value, 14),
                (policy.protocol.value, 11),
                (f"{policy.timeout_ms // 1000}s", 8),
            )

    if args.suites:
        suites = TestSuitesFile.from_yaml(settings.paths.get_suites_path())
        print_section("Наборы тестов")
        for name in suites.suite_names:
            cases = suites.get_cases(name)
            print(f"  {name} ({len(cases)}):")
            for case in cases:
                print(f"    - {case.name} [{case.language}]")

    print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="LoopBench CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  %(prog)s run                              # Все модели, набор по умолчанию
  %(prog)s run -m gpt-4.1 o3-mini -i 5      # Выбранные модели, 5 итераций
  %(prog)s run --tier lite                  # Одна модель уровня lite
  %(prog)s run --filter mini -s all         # Модели по шаблону, все наборы
  %(prog)s run --export results/run.json    # С экспортом результатов
  %(prog)s info --models                    # Реестр моделей
  %(prog)s info --suites                    # Наборы тестов
        """
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="Путь к settings.yaml")

    subparsers = parser.add_subparsers(dest="command", help="Команды")

    run_parser = subparsers.add_parser("run", help="Запустить бенчмарк")
    selection = run_parser.add_mutually_exclusive_group()
    selection.add_argument("-m", "--models", nargs="+", metavar="MODEL_ID",
                           help="ID моделей из реестра")
    selection.add_argument("--tier", choices=["lite", "regular", "pro"],
                           help="Одна модель выбранного уровня")
    selection.add_argument("--filter", metavar="PATTERN",
                           help="Регулярное выражение по имени или ID модели")
    run_parser.add_argument("-s", "--suite",
                            help="Набор тестов (или all); по умолчанию из настроек")
    run_parser.add_argument("-i", "--max-iterations", type=positive_int, default=None,
                            help="Максимум итераций цикла исправлений")
    run_parser.add_argument("--export", nargs="?", const="", default=None, metavar="PATH",
                            help="Сохранить результаты в JSON (без пути — в results/)")

    info_parser = subparsers.add_parser("info", help="Информация")
    info_parser.add_argument("--models", action="store_true", help="Реестр моделей")
    info_parser.add_argument("--suites", action="store_true", help="Наборы тестов")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    overrides = {}
    if args.command == "run" and args.max_iterations is not None:
        overrides["loop"] = {"max_iterations": args.max_iterations}

    settings = load_settings(args.config, **overrides)
    setup_logging(settings)

    if args.command == "run":
        return cmd_run(args, settings)
    elif args.command == "info":
        if not (args.models or args.suites):
            args.models = args.suites = True
        return cmd_info(args, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
