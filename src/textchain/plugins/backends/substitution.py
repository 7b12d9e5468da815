# src/textchain/plugins/backends/substitution.py
"""Local find/replace backend. No network, no side effects."""

from __future__ import annotations

import re

from textchain.contracts.errors import StepError, StepErrorCode
from textchain.contracts.results import StepResult

# $$, $&, $`, $', $n / $nn and $<name> in a regex replacement
_REFERENCE = re.compile(r"\$(?:([$&`'])|(\d\d?)|<([^>]*)>)")


def expand_replacement(match: re.Match[str], replace_text: str) -> str:
    """Expand ``$`` references in ``replace_text`` against one match.

    ``$$`` is a dollar sign, ``$&`` the whole match, ``$``` and ``$'`` the
    text before and after it. ``$n`` and ``$nn`` name a capture group: a
    two-digit reference falls back to a one-digit group followed by the
    digit, and a reference to a group the pattern does not have stays as
    written. A group that did not participate expands to the empty string.
    ``$<name>`` only expands when the pattern has named groups. Backslashes
    are never special.
    """
    group_count = match.re.groups

    def resolve(ref: re.Match[str]) -> str:
        symbol, digits, name = ref.groups()
        if symbol == "$":
            return "$"
        if symbol == "&":
            return match.group(0)
        if symbol == "`":
            return match.string[: match.start()]
        if symbol == "'":
            return match.string[match.end() :]
        if digits is not None:
            if len(digits) == 2 and 1 <= int(digits) <= group_count:
                return match.group(int(digits)) or ""
            if 1 <= int(digits[0]) <= group_count:
                return (match.group(int(digits[0])) or "") + digits[1:]
            return ref.group(0)
        if not match.re.groupindex:
            return ref.group(0)
        return match.groupdict().get(name) or ""

    return _REFERENCE.sub(resolve, replace_text)


def substitute(text: str, find_text: str, replace_text: str, use_regex: bool) -> StepResult:
    """Replace every occurrence of ``find_text`` in ``text``.

    Without ``use_regex`` this is a plain ``str.replace``. With it the pattern
    is compiled with ``re``, every match is replaced, and ``$`` references in
    ``replace_text`` are expanded by :func:`expand_replacement`. A pattern that
    does not compile fails the step; it never degrades to a literal match.

    Args:
        text: Current pipeline text
        find_text: Literal text or regular expression
        replace_text: Replacement text
        use_regex: Treat ``find_text`` as a regular expression

    Returns:
        StepResult with the substituted text, or INVALID_PATTERN
    """
    if not use_regex:
        return StepResult.success(text.replace(find_text, replace_text))

    try:
        pattern = re.compile(find_text)
    except re.error as e:
        return StepResult.failure(
            StepError(
                code=StepErrorCode.INVALID_PATTERN,
                message=f"Invalid regex pattern: {e}",
            )
        )

    return StepResult.success(pattern.sub(lambda match: expand_replacement(match, replace_text), text))
