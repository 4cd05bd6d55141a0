"""Operator confirmation prompts."""

from typing import Protocol

import click


class Confirmer(Protocol):
    """Anything that can turn a question into a yes/no answer."""

    def confirm(self, text: str) -> bool: ...


def is_affirmative(answer: str) -> bool:
    """Any answer containing a y (either case) counts as yes."""
    return "y" in answer.lower()


class ClickConfirmer:
    """Asks on the terminal and reads one answer from stdin."""

    def confirm(self, text: str) -> bool:
        answer = click.prompt(
            f"{text} [y/n]",
            default="",
            show_default=False,
            prompt_suffix=" ",
        )
        return is_affirmative(answer)


class AssumeYesConfirmer:
    """Answers yes to everything, for unattended runs."""

    def confirm(self, text: str) -> bool:
        click.echo(f"{text} [y/n] y (--yes)")
        return True
