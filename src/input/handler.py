"""
Input handling for Wildgrid.
Reads key events from the terminal and forwards them as Commands.
"""

import queue
import threading
from typing import Any, Dict, Optional

from config import CONFIG, DEFAULT_CONTROLS
from core.commands import Command
from ui.terminal import KeyEvent

_UNSET = object()


class InputHandler:
    """Translates key events into Commands on the command queue."""

    def __init__(
        self,
        terminal,
        controls: Optional[Dict[str, Any]] = None,
        poll_interval=_UNSET,
    ):
        self.terminal = terminal
        if controls is None:
            controls = CONFIG.controls
        # None blocks on the terminal until a key arrives
        self.poll_interval: Optional[float] = (
            CONFIG.input_poll_interval if poll_interval is _UNSET else poll_interval
        )

        # Load controls, each section falls back to the defaults on its own
        self.movement_map = self._load_section(controls, "movement")
        self.action_map = self._load_section(controls, "actions")
        self.quit_key = controls.get("quit", DEFAULT_CONTROLS["quit"])

    @staticmethod
    def _load_section(controls: Dict[str, Any], name: str) -> Dict[str, Command]:
        section = controls.get(name, DEFAULT_CONTROLS[name])
        return {key: Command(value) for key, value in section.items()}

    def is_quit(self, event: KeyEvent) -> bool:
        return event.key == self.quit_key

    def map_key(self, event: KeyEvent) -> Command:
        """Map a key event to a Command. Unknown keys become PAUSE."""
        if event.key in self.movement_map:
            return self.movement_map[event.key]
        if event.key in self.action_map:
            return self.action_map[event.key]
        return Command.PAUSE

    def run(self, command_queue: "queue.Queue[Command]", stop_event: threading.Event):
        """Forward commands until the quit key is pressed or stop_event is set.

        Returns normally on quit; terminal errors propagate to the caller.
        """
        while not stop_event.is_set():
            event = self.terminal.read_key_event(timeout=self.poll_interval)
            if event is None:
                continue
            if self.is_quit(event):
                return
            command_queue.put(self.map_key(event))
