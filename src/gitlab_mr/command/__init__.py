"""CLI command modules for gitlab-mr."""

from gitlab_mr.command.checkout import CheckoutCommand
from gitlab_mr.command.edit import EditCommand
from gitlab_mr.command.list import ListCommand
from gitlab_mr.command.open import OpenCommand
from gitlab_mr.command.view import ViewCommand

__all__ = [
    "OpenCommand",
    "ListCommand",
    "ViewCommand",
    "CheckoutCommand",
    "EditCommand",
]
