"""
commandtree token classification.

Every token is classified independently by its leading dashes:

    ""            -> NONE
    "build"       -> TEXT      (command name or raw value)
    "--verbose"   -> LONG      "verbose"
    "-v"          -> SHORT     "v"
    "-abc"        -> COMBINED  "abc"
    "-", "--", "---x" -> INVALID

The classifier is pure: it never consumes anything and keeps no state, so the
same token may be classified as often as the matching loops need.
"""
from enum import IntEnum


class ArgumentKind(IntEnum):
    NONE = 0
    INVALID = 1
    TEXT = 2
    LONG = 3
    SHORT = 4
    COMBINED = 5

    def describe(self):
        """human label used in fault messages"""
        return {
            ArgumentKind.NONE: "nothing",
            ArgumentKind.INVALID: "invalid argument",
            ArgumentKind.TEXT: "command or raw argument",
            ArgumentKind.LONG: "long parameter",
            ArgumentKind.SHORT: "short parameter",
            ArgumentKind.COMBINED: "combined short parameters",
        }[self]


def classify_token(token, /):
    """
    Classify a single token, returning (text, kind).

    text is the token stripped of its dashes for parameters, the token itself
    for TEXT and "" for NONE/INVALID.
    """
    if not isinstance(token, str):
        raise TypeError("classify_token() argument must be a string")
    if not token:
        return "", ArgumentKind.NONE
    text = token.lstrip("-")
    match len(token) - len(text):
        case 0:
            return token, ArgumentKind.TEXT
        case 1 if text:
            return text, ArgumentKind.SHORT if len(text) == 1 else ArgumentKind.COMBINED
        case 2 if text:
            return text, ArgumentKind.LONG
        case _:
            return "", ArgumentKind.INVALID


def classify(tokens, /):
    """Classify the first of the remaining tokens (NONE when there is none)."""
    if not tokens:
        return "", ArgumentKind.NONE
    return classify_token(tokens[0])


__all__ = (
    "ArgumentKind",
    "classify",
    "classify_token",
)
