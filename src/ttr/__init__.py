"""TTR: pick a task with one keystroke and run it."""

from ttr.config import VERSION

__version__ = VERSION
