"""
CancellationToken — кооперативная остановка прогона

Координатор проверяет токен только на границах пар (перед моделью,
перед тестом, перед проверкой доступности). Вызов, который уже
выполняется, доходит до конца или до своего таймаута.
"""

import threading


class CancellationToken:
    """
    Флаг остановки, безопасный для установки из другого потока
    или из обработчика сигнала.

    Example:
        token = CancellationToken()
        runner.run(models, cases, cancel_token=token)
        # где-то в UI:
        token.cancel()
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Запросить остановку"""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Запрошена ли остановка"""
        return self._event.is_set()
