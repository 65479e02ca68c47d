"""
Diagnostic rendering.

Produces the human-readable explanation of a failed verification. Exactly
one of three message shapes is rendered, matching the relation the differ
stopped at: mismatch, missing, or extra.

PRESENTATION ONLY: messages are not parsed by anything and carry no
authority beyond the DiffResult they describe.
"""

from __future__ import annotations

from typing import Any

import yaml

from verifier.app.schemas.declaration import Declaration
from verifier.app.schemas.objects import semantic_form
from verifier.app.schemas.verification_result import DiffResult

INDENT = "    "


def indent(text: str, levels: int = 2) -> str:
    prefix = INDENT * levels
    return "".join(
        f"{prefix}{line}\n" for line in text.rstrip("\n").splitlines()
    )


def _dump(value: Any) -> str:
    return yaml.safe_dump(value, sort_keys=True, default_flow_style=False)


def render_message(
    declaration: Declaration,
    diff: DiffResult,
    *,
    negate: bool = False,
) -> str:
    """
    Render the diagnostic for a diff.

    `negate` selects the phrasing for negated assertions. Returns an empty
    string for a passing diff.
    """
    addition = "to be" if negate else "not to be"
    subject = f"Declaration {declaration.namespace}/{declaration.name}"

    if diff.mismatches:
        message = (
            f"Expected for {subject} the following object mismatches "
            f"{addition} found:\n"
        )
        for mismatch in diff.mismatches:
            message += f"{mismatch.identity}:\n"
            message += "Expected\n"
            message += indent(_dump(semantic_form(mismatch.available)))
            message += "to equal\n"
            message += indent(_dump(semantic_form(mismatch.expected)))
        return message

    if diff.missing:
        message = (
            f"Expected for {subject} the following elements "
            f"{addition} absent:\n"
        )
        for identity in diff.missing:
            message += indent(identity)
        return message

    if diff.extra:
        message = (
            f"Expected for {subject} the following extra and unexpected "
            f"elements {addition} found:\n"
        )
        for identity in diff.extra:
            message += indent(identity)
        return message

    return ""


def render_type_error(actual: Any) -> str:
    """
    Message used when the assertion subject is not a Declaration.
    """
    return (
        f"expected Declaration.  got:\n"
        f"{indent(f'<{type(actual).__name__}>: {actual!r}', 1)}"
    )
