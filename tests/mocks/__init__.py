"""
Mock package — подделки для тестов без сети

- ScriptedGateway: шлюз, отвечающий по заранее заданному сценарию
- FakeSession / FakeResponse: подмена requests.Session
- FakeBenchmarkObserver: записывает события прогона
"""

from .fake_gateway import ScriptedGateway, make_result
from .fake_http import FakeResponse, FakeSession
from .fake_observer import FakeBenchmarkObserver

__all__ = [
    "ScriptedGateway",
    "make_result",
    "FakeResponse",
    "FakeSession",
    "FakeBenchmarkObserver",
]
