"""
Terminal surface: raw keyboard input and cursor/screen control.
Input uses termios directly, output goes through a rich Console.
"""

import codecs
import os
import select
import sys
import termios
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

from rich.console import Console
from rich.control import Control


@dataclass(frozen=True)
class KeyEvent:
    """A single key press: a printable char or a named key like 'up'."""

    key: str


ESCAPE_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
}

NAMED_CHARS = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
}


# Seconds to wait for the rest of an escape sequence before treating
# a bare ESC as the escape key
ESCAPE_DELAY = 0.05


def _is_csi_final(char: str) -> bool:
    return "@" <= char <= "~"


def split_keys(data: str, final: bool = False) -> Tuple[List[KeyEvent], str]:
    """Split raw terminal input into key events.

    Returns the events and any trailing, still incomplete escape sequence.
    With final=True nothing is held back.
    """
    events = []
    i = 0
    while i < len(data):
        if data[i] != "\x1b":
            char = data[i]
            events.append(KeyEvent(NAMED_CHARS.get(char, char)))
            i += 1
            continue

        seq = data[i : i + 3]
        if seq in ESCAPE_SEQUENCES:
            events.append(KeyEvent(ESCAPE_SEQUENCES[seq]))
            i += 3
            continue
        if not final and seq in ("\x1b", "\x1b[", "\x1bO"):
            return events, data[i:]
        if seq[1:2] == "[":
            # Unknown CSI sequence: swallow it up to its final byte
            j = i + 2
            while j < len(data) and not _is_csi_final(data[j]):
                j += 1
            if j == len(data) and not final:
                return events, data[i:]
            events.append(KeyEvent("unknown"))
            i = j + 1
            continue
        events.append(KeyEvent("escape"))
        i += 1
    return events, ""


def parse_keys(data: str) -> List[KeyEvent]:
    """Split a complete chunk of raw terminal input into key events."""
    return split_keys(data, final=True)[0]


class TerminalSurface:
    """Owns the real terminal for the lifetime of a game session."""

    def __init__(self, console: Optional[Console] = None, stdin=None):
        self.console = console or Console(force_terminal=True, highlight=False)
        self.stdin = stdin or sys.stdin
        self.is_tty = self.stdin.isatty()
        try:
            self.stdin_fd: Optional[int] = self.stdin.fileno()
        except (AttributeError, OSError, ValueError):
            # In-memory streams have no descriptor
            self.stdin_fd = None
        self.old_settings = None
        self._pending: Deque[KeyEvent] = deque()
        # Trailing bytes of an escape sequence still waiting for the rest
        self._partial = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def raw_enabled(self) -> bool:
        return self.old_settings is not None

    def enable_raw_input(self):
        """Setup terminal for raw input."""
        if not self.is_tty or self.raw_enabled:
            return
        self.old_settings = termios.tcgetattr(self.stdin_fd)
        new_settings = termios.tcgetattr(self.stdin_fd)
        new_settings[3] = new_settings[3] & ~(termios.ECHO | termios.ICANON)
        termios.tcsetattr(self.stdin_fd, termios.TCSADRAIN, new_settings)

    def disable_raw_input(self):
        """Restore terminal to original settings."""
        if not self.raw_enabled:
            return
        settings, self.old_settings = self.old_settings, None
        termios.tcsetattr(self.stdin_fd, termios.TCSADRAIN, settings)

    def clear_screen(self):
        self.console.control(Control.clear(), Control.home())

    def move_cursor(self, row: int, col: int):
        self.console.control(Control.move_to(col, row))

    def hide_cursor(self):
        self.console.show_cursor(False)

    def show_cursor(self):
        self.console.show_cursor(True)

    def write(self, text: str):
        # Text is already styled; bypass rich markup and wrapping
        self.console.file.write(text)

    def flush(self):
        self.console.file.flush()

    def _read_chunk(self, timeout: Optional[float]) -> Optional[str]:
        """Read whatever input is available, or None after timeout seconds."""
        if self.stdin_fd is None:
            text = self.stdin.read(32)
            if not text:
                raise EOFError("stdin closed")
            return text
        # Go to the descriptor directly so no input sits in a Python buffer
        ready, _, _ = select.select([self.stdin_fd], [], [], timeout)
        if not ready:
            return None
        data = os.read(self.stdin_fd, 32)
        if not data:
            raise EOFError("stdin closed")
        return self._decoder.decode(data)

    def read_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Block until a key is pressed, or return None after timeout seconds."""
        while not self._pending:
            text = self._read_chunk(ESCAPE_DELAY if self._partial else timeout)
            if text is None:
                if not self._partial:
                    return None
                # Nothing followed the ESC, so it was a key of its own
                events, self._partial = split_keys(self._partial, final=True)
            else:
                events, self._partial = split_keys(self._partial + text)
            self._pending.extend(events)
        return self._pending.popleft()

    @contextmanager
    def session(self):
        """Raw input and a hidden cursor for the duration of the block."""
        self.enable_raw_input()
        try:
            self.hide_cursor()
            self.clear_screen()
            self.flush()
            yield self
        finally:
            try:
                self.show_cursor()
                self.clear_screen()
                self.flush()
            finally:
                self.disable_raw_input()
