"""
Frame presentation for Wildgrid.
Only touches the terminal when the frame changed or a message is waiting.
"""

from typing import Optional


class Renderer:
    """Writes frames to a terminal surface, skipping redundant redraws."""

    def __init__(self, terminal):
        self.terminal = terminal
        self.previous_frame: Optional[str] = None

    def needs_redraw(self, frame: str, message: Optional[str] = None) -> bool:
        return frame != self.previous_frame or message is not None

    def present(self, frame: str, message: Optional[str] = None) -> bool:
        """Draw frame (and message below it) if anything changed.

        Returns True if the terminal was written to. Output is flushed
        either way so the terminal stays responsive.
        """
        wrote = False
        if self.needs_redraw(frame, message):
            self.terminal.clear_screen()
            self.terminal.move_cursor(0, 0)
            self.terminal.write(frame)
            if message is not None:
                self.terminal.write("\r\n" + message)
            self.previous_frame = frame
            wrote = True
        self.terminal.flush()
        return wrote
