"""
Main entry point for Wildgrid.
"""

import sys
import os

# Add the directory containing this file (src) to the Python path
# This allows imports like 'from core.engine import ...' to work
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from config import CONFIG
from core.supervisor import Outcome, Supervisor
from ui.terminal import TerminalSurface


def main():
    """Entry point for the game."""
    print(f"Starting {CONFIG.game_title}... (arrows to move, m to mark, q to quit)")

    supervisor = Supervisor(TerminalSurface(), config=CONFIG)
    try:
        outcome = supervisor.run()
    except KeyboardInterrupt:
        print("\nGame interrupted by user.")
        sys.exit(0)
    except Exception as e:
        import traceback

        with open(CONFIG.crash_log, "a") as f:
            f.write(f"CRASH REPORT:\n{str(e)}\n\n{traceback.format_exc()}")
        print(f"An error occurred: {e}")
        print(f"See {CONFIG.crash_log} for details.")
        sys.exit(1)

    if outcome is not Outcome.QUIT:
        print(outcome.diagnostic)
        print(f"See {CONFIG.crash_log} for details.")
    sys.exit(outcome.exit_code)


if __name__ == "__main__":
    main()
