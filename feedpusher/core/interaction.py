"""Operator interaction: questions and secret prompts.

The core never talks to the terminal directly.  It asks an object
implementing ``Interaction``; ``ConsoleInteraction`` is the Rich-based
implementation used by the CLI.  Pre-supplied answers (``--answer
PushToRemote=Y``) are looked up by question key before anything is asked.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.prompt import Prompt

from feedpusher.models.routing import InteractionMode

logger = logging.getLogger(__name__)


class InteractionNotAllowed(RuntimeError):
    """Raised when a question is asked in ``NO_INTERACTION`` mode."""


@runtime_checkable
class Interaction(Protocol):
    """Protocol for operator interaction backends."""

    @property
    def mode(self) -> InteractionMode:
        """The interaction mode of the run."""
        ...

    def read_option(self, key: str, message: str, options: Sequence[str]) -> str:
        """Ask a single-choice question and return one of *options*.

        Parameters
        ----------
        key:
            Stable identifier of the question, used to look up
            pre-supplied answers (e.g. ``"PushToRemote"``).
        message:
            Text shown to the operator.
        options:
            Allowed uppercase single-character answers; the first one is
            the default in ``AUTO_INTERACTION`` mode.
        """
        ...

    def read_secret(self, name: str) -> str | None:
        """Ask for the value of the secret environment variable *name*."""
        ...


def _check_options(options: Sequence[str]) -> None:
    if not options:
        raise ValueError("At least one (uppercase) option must be provided.")
    if any(len(o) != 1 or not o.isupper() for o in options):
        raise ValueError("Options must be single uppercase letters.")


class ConsoleInteraction:
    """Asks questions on the terminal with Rich prompts.

    Parameters
    ----------
    mode:
        The run's interaction mode.
    answers:
        Pre-supplied answers keyed by question key.
    console:
        Rich console used for prompts.
    """

    def __init__(
        self,
        mode: InteractionMode = InteractionMode.INTERACTIVE,
        answers: Mapping[str, str] | None = None,
        console: Console | None = None,
    ) -> None:
        self._mode = mode
        self._answers = {k.lower(): v for k, v in (answers or {}).items()}
        self._console = console or Console()

    @property
    def mode(self) -> InteractionMode:
        return self._mode

    def read_option(self, key: str, message: str, options: Sequence[str]) -> str:
        _check_options(options)
        if self._mode == InteractionMode.NO_INTERACTION:
            raise InteractionNotAllowed(f"Interactions are not allowed ({key}).")

        supplied = self._answers.get(key.lower())
        if supplied is not None:
            answer = supplied.strip().upper()
            if answer in options:
                return answer
            logger.error(
                "Provided answer for %s (%s) is invalid. It must be one of: %s",
                key,
                supplied,
                "/".join(options),
            )

        if self._mode == InteractionMode.AUTO_INTERACTION:
            return options[0]

        answer = Prompt.ask(
            message,
            console=self._console,
            choices=list(options) + [o.lower() for o in options],
            show_choices=True,
        )
        return answer.upper()

    def read_secret(self, name: str) -> str | None:
        if self._mode != InteractionMode.INTERACTIVE:
            return None
        value = Prompt.ask(
            f"Environment variable '{name}' not found. Enter its value",
            console=self._console,
            password=True,
            default="",
            show_default=False,
        )
        return value or None
