"""
Tests for the terminal surface: key decoding and output plumbing.
"""

import io
import os
from unittest.mock import MagicMock

import pytest
from rich.console import Console
from ui.renderer import Renderer
from ui.terminal import KeyEvent, TerminalSurface, parse_keys, split_keys


class TestParseKeys:
    """Test decoding raw input into key events."""

    @pytest.mark.parametrize(
        "data, key",
        [
            ("\x1b[A", "up"),
            ("\x1b[B", "down"),
            ("\x1b[C", "right"),
            ("\x1b[D", "left"),
            ("\x1bOA", "up"),
            ("\x1bOD", "left"),
            ("q", "q"),
            ("\r", "enter"),
            ("\x7f", "backspace"),
            ("\x1b", "escape"),
        ],
    )
    def test_single_key(self, data, key):
        assert parse_keys(data) == [KeyEvent(key)]

    def test_batched_input(self):
        assert parse_keys("\x1b[Cm\x1b[Aq") == [
            KeyEvent("right"),
            KeyEvent("m"),
            KeyEvent("up"),
            KeyEvent("q"),
        ]

    def test_unknown_sequence_swallowed(self):
        # F5 is ESC [ 1 5 ~
        assert parse_keys("\x1b[15~x") == [KeyEvent("unknown"), KeyEvent("x")]

    def test_empty(self):
        assert parse_keys("") == []


class TestSplitKeys:
    """Test holding back escape sequences cut off at the end of a read."""

    @pytest.mark.parametrize("data", ["\x1b", "\x1b[", "\x1bO", "\x1b[1", "\x1b[15"])
    def test_incomplete_sequence_held(self, data):
        assert split_keys(data) == ([], data)

    def test_keys_before_partial_returned(self):
        assert split_keys("m\x1b") == ([KeyEvent("m")], "\x1b")

    def test_complete_input_leaves_nothing(self):
        assert split_keys("\x1b[Bq") == ([KeyEvent("down"), KeyEvent("q")], "")

    def test_final_flushes_partial(self):
        assert split_keys("\x1b", final=True) == ([KeyEvent("escape")], "")


@pytest.fixture
def surface():
    stdin = MagicMock()
    stdin.isatty.return_value = False
    stdin.fileno.side_effect = io.UnsupportedOperation
    console = Console(file=io.StringIO(), force_terminal=True)
    return TerminalSurface(console=console, stdin=stdin)


class TestTerminalSurface:
    """Test the surface without a real TTY."""

    def test_raw_mode_noop_without_tty(self, surface):
        surface.enable_raw_input()
        assert not surface.raw_enabled
        surface.disable_raw_input()

    def test_write_is_verbatim(self, surface):
        surface.write("\x1b[43m \x1b[0m")
        surface.flush()

        assert surface.console.file.getvalue() == "\x1b[43m \x1b[0m"

    def test_session_restores_cursor(self, surface):
        with surface.session():
            pass

        output = surface.console.file.getvalue()
        assert output.index("\x1b[?25l") < output.index("\x1b[?25h")
        assert not surface.raw_enabled

    def test_pending_keys_served_first(self, surface):
        surface._pending.extend([KeyEvent("up"), KeyEvent("q")])

        assert surface.read_key_event(timeout=0) == KeyEvent("up")
        assert surface.read_key_event(timeout=0) == KeyEvent("q")


class ChunkedStream:
    """Non-TTY stdin that hands out input one read() at a time."""

    def __init__(self, *chunks):
        self.chunks = list(chunks)

    def isatty(self):
        return False

    def fileno(self):
        raise io.UnsupportedOperation("fileno")

    def read(self, size=-1):
        return self.chunks.pop(0) if self.chunks else ""


@pytest.fixture
def pipe_surface():
    read_fd, write_fd = os.pipe()
    stdin = os.fdopen(read_fd, "rb", buffering=0)
    console = Console(file=io.StringIO(), force_terminal=True)
    yield TerminalSurface(console=console, stdin=stdin), write_fd
    stdin.close()
    os.close(write_fd)


class TestReadKeyEvent:
    """Test reading keys from streams and file descriptors."""

    def test_arrow_split_across_reads(self):
        surface = TerminalSurface(
            console=Console(file=io.StringIO()), stdin=ChunkedStream("\x1b[", "A")
        )

        assert surface.read_key_event(timeout=0.5) == KeyEvent("up")

    def test_in_memory_stream(self):
        surface = TerminalSurface(console=Console(file=io.StringIO()), stdin=io.StringIO("mq"))

        assert surface.stdin_fd is None
        assert surface.read_key_event(timeout=0) == KeyEvent("m")
        assert surface.read_key_event(timeout=0) == KeyEvent("q")
        with pytest.raises(EOFError):
            surface.read_key_event(timeout=0)

    def test_arrow_from_descriptor(self, pipe_surface):
        surface, write_fd = pipe_surface
        os.write(write_fd, b"\x1b[C")

        assert surface.read_key_event(timeout=0.5) == KeyEvent("right")

    def test_lone_escape_after_delay(self, pipe_surface):
        surface, write_fd = pipe_surface
        os.write(write_fd, b"\x1b")

        assert surface.read_key_event(timeout=0.5) == KeyEvent("escape")

    def test_timeout_returns_none(self, pipe_surface):
        surface, _ = pipe_surface

        assert surface.read_key_event(timeout=0.01) is None

    def test_multibyte_char_split_across_reads(self, pipe_surface):
        surface, write_fd = pipe_surface
        data = "é".encode()
        os.write(write_fd, data[:1])
        assert surface.read_key_event(timeout=0.01) is None

        os.write(write_fd, data[1:])
        assert surface.read_key_event(timeout=0.5) == KeyEvent("é")


class TestRenderer:
    """Test the frame diffing renderer."""

    def test_skips_unchanged_frame(self):
        terminal = MagicMock()
        renderer = Renderer(terminal)

        assert renderer.present("frame") is True
        assert renderer.present("frame") is False
        terminal.write.assert_called_once_with("frame")
        assert terminal.flush.call_count == 2

    def test_message_written_below_frame(self):
        terminal = MagicMock()
        renderer = Renderer(terminal)
        renderer.present("frame")

        assert renderer.present("frame", "hello") is True
        terminal.write.assert_called_with("\r\nhello")
