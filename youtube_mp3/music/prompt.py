"""
Interactive confirmation of song metadata

Each field is shown with its best-guess default. Pressing enter keeps the
default, typing replaces it. The pipeline blocks here until every field is
answered.
"""

from typing import Callable, Optional

import click

from ..models import SongMetadata

# (label, attribute, required)
PROMPT_FIELDS = (
    ("Title", "title", True),
    ("Artist", "artist", True),
    ("Album", "album", False),
    ("Genre", "genre", False),
    ("Year", "date", False),
)


def ask_field(label: str, default: Optional[str], required: bool, prompt: Callable = click.prompt) -> Optional[str]:
    """
    Ask for one field until an acceptable answer is given

    Args:
        label: Field name shown to the user
        default: Current best guess, None if unknown
        required: Re-prompt on empty answers when there is no default
        prompt: click.prompt compatible callable

    Returns:
        The typed value, the default, or None for an empty optional field
    """
    while True:
        answer = prompt(label, default=default or '', show_default=bool(default))
        value = (answer or '').strip() or default
        if value or not required:
            return value or None


def confirm_metadata(
    metadata: SongMetadata,
    default_album: str = "Single",
    interactive: bool = True,
    prompt: Callable = click.prompt
) -> SongMetadata:
    """
    Let the user confirm or override the resolved metadata

    Args:
        metadata: Resolved defaults
        default_album: Album used when none was resolved
        interactive: When False, accept every default without asking
        prompt: click.prompt compatible callable

    Returns:
        Confirmed metadata; lookup extras are carried over unchanged
    """
    defaults = metadata.with_values(album=metadata.album or default_album)
    if not interactive:
        return defaults

    answers = {}
    for label, attribute, required in PROMPT_FIELDS:
        answers[attribute] = ask_field(label, getattr(defaults, attribute), required, prompt=prompt)

    return defaults.with_values(**answers)
