"""Unit tests configuration file."""

import os
from dataclasses import dataclass
from enum import Enum

import pytest

from scriptbind.generator import parse_file
from scriptbind.runtime import Registry, ScriptEngine

TESTS_DIR = os.path.dirname(os.path.realpath(__file__))
GAME_BIND = os.path.join(TESTS_DIR, "game.bind")


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


class PlayerStatus(Enum):
    Idle = "idle"
    Walking = "walking"
    Attacking = "attacking"


@dataclass(frozen=True)
class Command:
    kind: str
    steps: int = 0

    @classmethod
    def Move(cls, steps: int) -> "Command":
        return cls("Move", steps)

    def is_stop(self) -> bool:
        return self.kind == "Stop"


Command.Stop = Command("Stop")


@dataclass
class Player:
    name: str
    hp: int
    status: PlayerStatus = PlayerStatus.Idle
    title: str | None = None

    @staticmethod
    def new(name: str) -> "Player":
        return Player(name=name, hp=100)

    def take_damage(self, amount: int) -> None:
        self.hp = max(0, self.hp - amount)

    def is_alive(self) -> bool:
        return self.hp > 0

    def set_status(self, status: PlayerStatus) -> None:
        self.status = status

    def renamed(self, name: str) -> "Player":
        self.name = name
        return self


NATIVES = {"PlayerStatus": PlayerStatus, "Command": Command, "Player": Player}


@pytest.fixture
def natives():
    return dict(NATIVES)


@pytest.fixture
def bindings():
    return parse_file(GAME_BIND)


@pytest.fixture
def engine():
    return ScriptEngine()


@pytest.fixture
def registry(engine, bindings, natives):
    registry = Registry(engine)
    registry.register_bindings(bindings, natives)
    return registry
