#!/usr/bin/env python3
"""gitlab-mr CLI - GitLab merge request workflows from the terminal."""

import asyncio

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from gitlab_mr.command.checkout import CheckoutCommand
from gitlab_mr.command.edit import EditCommand
from gitlab_mr.command.list import ListCommand
from gitlab_mr.command.open import OpenCommand
from gitlab_mr.command.view import ViewCommand
from gitlab_mr.core.config import State
from gitlab_mr.core.log import logger


class CliState(State):
    """Open, list, view, check out and edit GitLab merge requests
    of the repository in the current directory.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.target_branch main)
    2. YAML: --include files, ./gitlab-mr.yaml, the user config file
       (platformdirs user_config_dir), package defaults
    3. .env file for secrets
    4. Environment variables (GITLAB_MR_CONFIG__ACCESS_TOKEN=...)

    The [JSON] options allow setting multiple values at once:
      --config.access_tokens '{"https://gitlab.example.com": "..."}'
    """

    open: CliSubCommand[OpenCommand]
    list: CliSubCommand[ListCommand]
    view: CliSubCommand[ViewCommand]
    checkout: CliSubCommand[CheckoutCommand]
    edit: CliSubCommand[EditCommand]

    def cli_cmd(self):
        """Dispatch to active subcommand, or show help if none
        provided."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            import sys
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        # Use logger as context manager to ensure files are closed on exit
        with logger:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
