"""Command-line interface for probeset."""

from .commands import CLIContext, register_subcommands
from .shell import prompt_for_roster, run_shell

__all__ = ["CLIContext", "prompt_for_roster", "register_subcommands", "run_shell"]
