"""Tic-tac-toe package exposing the board, the search engine, and the web application."""

from .ai import SearchEngine
from .game import Board, TerminalResult
from .ui import app

__all__ = ["Board", "SearchEngine", "TerminalResult", "app"]
