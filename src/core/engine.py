"""
Main game engine for Wildgrid: the simulation and render loop.
"""

import queue
import threading
import time
from collections import deque
from typing import Deque, Optional

from config import CONFIG, GameConfig
from core.commands import Command
from ui.renderer import Renderer
from world.chunk_manager import World, create_world
from world.map import CellContent, CellOccupied, Position


class GameEngine:
    """Owns the world and the player, and draws them every tick.

    Everything here is confined to the thread that calls run(); the only
    inbound channel is the command queue.
    """

    def __init__(
        self,
        terminal,
        command_queue: Optional["queue.Queue[Command]"] = None,
        world: Optional[World] = None,
        config: Optional[GameConfig] = None,
    ):
        self.config = config or CONFIG
        self.command_queue = command_queue if command_queue is not None else queue.Queue()
        if world is None:
            world = create_world(self.config.world_seed, chunk_size=self.config.chunk_size)
        self.world = world
        self.renderer = Renderer(terminal)

        self.player_pos: Position = (
            self.config.player_start_x,
            self.config.player_start_y,
        )
        self.half_extent = self.config.viewport_half_extent

        # Message Log
        self.message_log: Deque[str] = deque(maxlen=self.config.message_log_size)
        self.pending_message: Optional[str] = None

    def log(self, text: str):
        """Add a message to the log and show it on the next frame."""
        self.message_log.append(text)
        self.pending_message = text

    def move_player(self, dx: int, dy: int):
        """Move the player by the given amount."""
        x, y = self.player_pos
        self.player_pos = (x + dx, y + dy)

    def place_marker(self):
        """Mark the player's cell. An occupied cell is reported, not fatal."""
        try:
            self.world.set_content(self.player_pos, CellContent.MARKER)
        except CellOccupied as e:
            self.log(str(e))

    def handle_command(self, command: Command):
        """Apply one command to the game state."""
        if command.is_movement:
            self.move_player(*command.delta)
        elif command == Command.PLACE_MARKER:
            self.place_marker()
        # PAUSE changes nothing

    def poll_command(self) -> Optional[Command]:
        """Take at most one command off the queue without waiting."""
        try:
            return self.command_queue.get_nowait()
        except queue.Empty:
            return None

    def build_frame(self) -> str:
        """Viewport around the player plus a status line."""
        viewport = self.world.render_viewport(self.player_pos, self.half_extent)
        x, y = self.player_pos
        return f"{viewport}\r\n{self.config.game_title} ({x}, {y})"

    def render(self) -> bool:
        """Render the game. Returns True if the terminal was written to."""
        message, self.pending_message = self.pending_message, None
        return self.renderer.present(self.build_frame(), message)

    def step(self) -> bool:
        """Run one tick. Returns True if a command was consumed."""
        command = self.poll_command()
        if command is not None:
            self.handle_command(command)
        self.render()
        return command is not None

    def run(self, stop_event: threading.Event):
        """Tick until stop_event is set. Terminal errors propagate."""
        while not stop_event.is_set():
            if not self.step():
                self.throttle()

    def throttle(self):
        """Yield the CPU between idle ticks. idle_sleep = 0 spins."""
        if self.config.idle_sleep > 0:
            time.sleep(self.config.idle_sleep)
