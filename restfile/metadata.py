"""Folds ``# @key value`` directives into :class:`RequestMetadata`."""

from __future__ import annotations

from restfile.constants import PASSWORD_PROMPT_NAMES
from restfile.models import PromptVariable, RequestMetadata


def parse_prompt(value: str) -> PromptVariable:
    """Build a prompt from ``"<name> [description]"``."""
    name, _, description = value.partition(" ")
    return PromptVariable(
        name=name,
        description=description,
        is_password=name.lower() in PASSWORD_PROMPT_NAMES,
    )


def apply_metadata(metadata: RequestMetadata, key: str, value: str) -> None:
    """Apply one directive to ``metadata`` in place.

    ``name`` overwrites, ``note`` accumulates one line per occurrence, the two
    flag directives are idempotent, and unknown keys are ignored.
    """
    if key == "name":
        metadata.name = value
    elif key == "note":
        metadata.note = f"{metadata.note}\n{value}" if metadata.note else value
    elif key == "no-redirect":
        metadata.no_redirect = True
    elif key == "no-cookie-jar":
        metadata.no_cookie_jar = True
    elif key == "prompt":
        metadata.prompts.append(parse_prompt(value))
