"""Local network outage detection with automatic recovery actions.

Modules: config (TOML settings), network (ping, port and command checks),
monitor (monitoring loop and recovery), app and gui (desktop window), and
cli (the ``netwatchdog`` command).
"""

__version__ = "0.1.0"