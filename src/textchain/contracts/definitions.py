"""Transformation definitions: the read-only input of every run.

A Transformation is an ordered tuple of steps. Steps form a closed union:
the executor matches on it exhaustively, so a new step kind is a change to
this module and to the executor together.
"""

from __future__ import annotations

from dataclasses import dataclass

# Token replaced with the current pipeline text in rewrite prompt templates.
INPUT_PLACEHOLDER = "{{input}}"


@dataclass(frozen=True)
class SubstitutionStep:
    """Local find/replace, literal or regular expression."""

    step_id: str
    find_text: str
    replace_text: str
    use_regex: bool = False


@dataclass(frozen=True)
class RewriteStep:
    """Remote language-model rewrite.

    ``provider`` keeps the stored identifier verbatim. Resolution to a
    Provider member happens in the executor so that an unknown identifier
    fails the step instead of the definition load.
    """

    step_id: str
    provider: str
    model_id: str
    system_prompt_template: str
    user_prompt_template: str


@dataclass(frozen=True)
class UnsupportedStep:
    """A stored step whose type tag this engine does not implement."""

    step_id: str
    step_type: str


Step = SubstitutionStep | RewriteStep | UnsupportedStep


@dataclass(frozen=True)
class Transformation:
    """A named, ordered list of processing steps."""

    transformation_id: str
    title: str
    steps: tuple[Step, ...]
    description: str = ""


@dataclass(frozen=True)
class Recording:
    """The slice of a stored recording that the pipeline consumes."""

    recording_id: str
    transcribed_text: str
