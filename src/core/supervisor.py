"""
Supervisor: runs the input and game threads and owns the terminal session.
"""

import queue
import threading
import traceback
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Tuple

from config import CONFIG, GameConfig
from core.engine import GameEngine
from input.handler import InputHandler


class Outcome(Enum):
    """How a game session ended, with its exit code and diagnostic."""

    QUIT = (0, "")
    INPUT_CRASH = (1, "Error in input thread")
    GAME_CRASH = (2, "Error in game thread")

    @property
    def exit_code(self) -> int:
        return self.value[0]

    @property
    def diagnostic(self) -> str:
        return self.value[1]


class TerminationSignal:
    """One-shot channel: many senders, the first value wins."""

    def __init__(self):
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._outcome: Optional[Outcome] = None

    def send(self, outcome: Outcome) -> bool:
        """Offer an outcome. Returns False if another one already won."""
        with self._lock:
            if self._outcome is not None:
                return False
            self._outcome = outcome
        self._event.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> Optional[Outcome]:
        self._event.wait(timeout)
        return self._outcome

    @property
    def is_set(self) -> bool:
        return self._event.is_set()


class Supervisor:
    """Starts both loops, waits for the first to finish and cleans up."""

    def __init__(
        self,
        terminal,
        config: Optional[GameConfig] = None,
        engine: Optional[GameEngine] = None,
        input_handler: Optional[InputHandler] = None,
    ):
        self.config = config or CONFIG
        self.terminal = terminal
        self.command_queue: "queue.Queue" = queue.Queue()
        self.stop_event = threading.Event()
        self.termination = TerminationSignal()

        if engine is None:
            engine = GameEngine(terminal, self.command_queue, config=self.config)
        else:
            engine.command_queue = self.command_queue
        self.engine = engine
        self.input_handler = input_handler or InputHandler(
            terminal,
            controls=self.config.controls,
            poll_interval=self.config.input_poll_interval,
        )

        self.threads: List[threading.Thread] = []
        # (thread name, formatted traceback) for every worker that crashed
        self.crash_reports: List[Tuple[str, str]] = []
        self._reports_lock = threading.Lock()

    def _worker(self, name: str, target: Callable[[], None], crash: Outcome):
        """Thread body: report QUIT on return, crash on any exception."""
        try:
            target()
        except Exception:
            with self._reports_lock:
                self.crash_reports.append((name, traceback.format_exc()))
            self.termination.send(crash)
        else:
            self.termination.send(Outcome.QUIT)

    def _start(self, name: str, target: Callable[[], None], crash: Outcome):
        thread = threading.Thread(
            target=self._worker, args=(name, target, crash), name=name, daemon=True
        )
        self.threads.append(thread)
        thread.start()

    def run(self) -> Outcome:
        """Run a whole session. The terminal is restored before this returns."""
        try:
            with self.terminal.session():
                self._start(
                    "input",
                    lambda: self.input_handler.run(self.command_queue, self.stop_event),
                    Outcome.INPUT_CRASH,
                )
                self._start(
                    "game",
                    lambda: self.engine.run(self.stop_event),
                    Outcome.GAME_CRASH,
                )
                try:
                    outcome = self.termination.wait()
                finally:
                    # Both loops must be stopped before the session restores the terminal
                    self.shutdown()
        finally:
            self.stop_event.set()
            self.write_crash_reports()
        return outcome

    def shutdown(self):
        """Ask both loops to stop and give them a moment to do so."""
        self.stop_event.set()
        for thread in self.threads:
            thread.join(self.config.join_timeout)

    def write_crash_reports(self):
        """Append crash tracebacks to the crash log. Needs a cooked terminal."""
        if not self.crash_reports or not self.config.crash_log:
            return
        with open(self.config.crash_log, "a") as f:
            for name, report in self.crash_reports:
                f.write(f"CRASH REPORT ({name} thread, {datetime.now().isoformat()}):\n")
                f.write(f"{report}\n")
