"""CLI command modules.

This package contains:
- setup: Setup, configure and help commands
- inspection: Inspection commands (home, light)
- control: Direct control commands (power, toggle, brightness, colour, sweep)
"""
