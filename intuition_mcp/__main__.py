"""Allow `python -m intuition_mcp`."""

from .server import main

main()
