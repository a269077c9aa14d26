"""MTGA log decoder: turns Player.log lines into RPC calls and game actions."""

__version__ = "0.1.0"
