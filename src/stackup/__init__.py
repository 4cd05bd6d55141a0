"""stackup - interactive upgrade utility for docker compose application stacks."""

__version__ = "0.1.0"
