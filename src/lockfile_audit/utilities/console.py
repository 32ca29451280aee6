# lockfile_audit/utilities/console.py

"""
Coloured console output.

Messages are written through a rich Console bound to the target stream.
Colour is only emitted when that stream is a terminal, so text written to a
file or pipe is plain.
"""

import sys
from typing import IO, Optional

from rich.console import Console
from rich.text import Text


def get_console(stream: Optional[IO[str]] = None) -> Console:
    """Create a console for ``stream`` (stdout when omitted)."""
    return Console(
        file=stream if stream is not None else sys.stdout,
        highlight=False,
        markup=False,
        emoji=False,
        soft_wrap=True,
    )


def say(message="", style: Optional[str] = None, stream: Optional[IO[str]] = None) -> None:
    """Print a message, coloured with ``style`` when the stream is a terminal."""
    get_console(stream).print(str(message), style=style)


def say_error(message="") -> None:
    say(message, style="red", stream=sys.stderr)


def labelled(label: str, value, style: str = "red") -> Text:
    """A 'Label: value' line with the label coloured."""
    return Text.assemble((f"{label}: ", style), str(value))
