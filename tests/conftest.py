"""
Pytest configuration and shared fixtures for Wildgrid tests.
"""

import pytest
import queue
import sys
import os
import threading
import time
from collections import deque

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from config import GameConfig
from core.engine import GameEngine
from ui.terminal import KeyEvent
from world.chunk_manager import World, create_world


class FixedRandom:
    """Random source that always returns the same roll."""

    def __init__(self, value: float):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


class FakeTerminal:
    """In-memory terminal surface with scripted key presses."""

    def __init__(self, keys=(), fail_read=None, fail_write=None):
        self.keys = deque(KeyEvent(k) for k in keys)
        self.fail_read = fail_read
        self.fail_write = fail_write
        self.raw = False
        self.raw_history = []
        self.cursor_visible = True
        self.output = []
        self.clears = 0
        self.flushes = 0
        self._lock = threading.Lock()

    def enable_raw_input(self):
        self.raw = True
        self.raw_history.append(True)

    def disable_raw_input(self):
        self.raw = False
        self.raw_history.append(False)

    def clear_screen(self):
        self.clears += 1

    def move_cursor(self, row, col):
        pass

    def hide_cursor(self):
        self.cursor_visible = False

    def show_cursor(self):
        self.cursor_visible = True

    def write(self, text):
        if self.fail_write is not None:
            raise self.fail_write
        with self._lock:
            self.output.append(text)

    def flush(self):
        self.flushes += 1

    def read_key_event(self, timeout=None):
        if self.fail_read is not None:
            raise self.fail_read
        with self._lock:
            if self.keys:
                return self.keys.popleft()
        time.sleep(timeout if timeout is not None else 0.01)
        return None

    def session(self):
        terminal = self

        class _Session:
            def __enter__(self):
                terminal.enable_raw_input()
                terminal.hide_cursor()
                return terminal

            def __exit__(self, *exc):
                terminal.show_cursor()
                terminal.disable_raw_input()
                return False

        return _Session()


@pytest.fixture
def config(tmp_path):
    """Game config with fast timings and a crash log under tmp_path."""
    return GameConfig(
        idle_sleep=0.001,
        input_poll_interval=0.01,
        join_timeout=1.0,
        crash_log=str(tmp_path / "game_debug.log"),
    )


@pytest.fixture
def world():
    """A seeded world with default chunking."""
    return create_world(seed=42)


@pytest.fixture
def sand_world():
    """A world where every roll lands on sand."""
    return World(rng=FixedRandom(0.95))


@pytest.fixture
def fake_terminal():
    return FakeTerminal()


@pytest.fixture
def command_queue():
    return queue.Queue()


@pytest.fixture
def engine(fake_terminal, command_queue, sand_world, config):
    """A GameEngine on an all-sand world drawing to a fake terminal."""
    return GameEngine(fake_terminal, command_queue, world=sand_world, config=config)
