"""
commandtree faults (registration and parse errors) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing error. Codes are
  grouped by domain so logs and searches stay predictable.
- CommandException: base type that carries message + options and knows how to
  render itself through rich (plain, colorful or fancy panel).
- RegistrationError: tree construction conflicts, raised immediately by the
  registration methods; the tree is never left half-mutated.
- ParseError and its subclasses: one class per parse-time failure kind.
- trigger(): central entry point to surface a fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- Parser.parse() raises faults directly so hosts can catch them.
- Parser.__invoke__() routes faults through trigger(): raised in non-shell mode,
  rendered on stderr followed by exit status 1 in shell mode.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - registration (101xx)
      • DUPLICATE_COMMAND, INVALID_NAME, DUPLICATE_NAME, PARAMETER_ORDER,
        MISSING_VALUE_SLOT, INVALID_VALUE_SLOT, AMBIGUOUS_RAW, MISSING_HANDLER
    - routing (1110x)
      • NO_ARGUMENTS, COMMAND_NOT_FOUND
    - parameters (1111x/1112x)
      • INVALID_ARGUMENT, PARAMETER_NOT_FOUND, DUPLICATE_PARAMETER,
        MISSING_VALUE, MISSING_REQUIRED
    - conversion (1113x)
      • CONVERSION_FAILURE
    - leftovers (1114x)
      • EXTRA_ARGUMENTS

    normalize() lets the host remap codes to custom labels while the numeric
    identifiers stay stable.
    """
    # --- registration errors (10xxx) ---
    DUPLICATE_COMMAND   = 10101
    INVALID_NAME        = 10102
    DUPLICATE_NAME      = 10103
    PARAMETER_ORDER     = 10104
    MISSING_VALUE_SLOT  = 10105
    INVALID_VALUE_SLOT  = 10106
    AMBIGUOUS_RAW       = 10107
    MISSING_HANDLER     = 10108

    # --- routing errors (11xxx) ---
    NO_ARGUMENTS        = 11100
    COMMAND_NOT_FOUND   = 11101

    # --- parameter errors (11xxx) ---
    INVALID_ARGUMENT    = 11111
    PARAMETER_NOT_FOUND = 11112
    DUPLICATE_PARAMETER = 11115
    MISSING_VALUE       = 11117
    MISSING_REQUIRED    = 11125

    # --- conversion errors (11xxx) ---
    CONVERSION_FAILURE  = 11131

    # --- leftover errors (11xxx) ---
    EXTRA_ARGUMENTS     = 11141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base fault: a message plus free-form rendering options.

    recognized options: code, title, hint, tool, shell, fancy, colorful, ratio.
    subclasses provide defaults for code and title through __fault__/__title__.
    """
    __fault__ = Unset
    __title__ = "command error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__fault__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint", "")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", getattr(tool, "name", "commandtree")), styler("prog-name"))

        parts = ["[ ", prog]
        if self.code is not Unset:
            parts += [" - ", text(self.code.normalize(), styler("code"))]
        parts += [" | ", text(self.title.title(), styler("error-title")), " ]"]
        header = Text.assemble(*parts)

        body = [text(self.message if self.message is not Unset else str(self), styler("error-message"))]
        if self.hint:
            body.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))

        if fancy:
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*body), title=header, title_align="left", width=width)

        return Group(header, *body)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__cause__ = self.__cause__
        return replica


class RegistrationError(CommandException):
    __title__ = "registration conflict"


class ParseError(CommandException):
    __title__ = "parse error"


class InvalidArgumentError(ParseError):
    __fault__ = FaultCode.INVALID_ARGUMENT
    __title__ = "invalid argument"


class NoArgumentsError(ParseError):
    __fault__ = FaultCode.NO_ARGUMENTS
    __title__ = "no arguments"


class CommandNotFoundError(ParseError):
    __fault__ = FaultCode.COMMAND_NOT_FOUND
    __title__ = "command not found"


class ParameterNotFoundError(ParseError):
    __fault__ = FaultCode.PARAMETER_NOT_FOUND
    __title__ = "unknown parameter"


class DuplicateParameterError(ParseError):
    __fault__ = FaultCode.DUPLICATE_PARAMETER
    __title__ = "duplicate parameter"


class MissingValueError(ParseError):
    __fault__ = FaultCode.MISSING_VALUE
    __title__ = "missing value"


class MissingRequiredError(ParseError):
    __fault__ = FaultCode.MISSING_REQUIRED
    __title__ = "missing required parameter"


class ExtraArgumentsError(ParseError):
    __fault__ = FaultCode.EXTRA_ARGUMENTS
    __title__ = "unexpected arguments"


class ConversionError(ParseError):
    __fault__ = FaultCode.CONVERSION_FAILURE
    __title__ = "invalid value"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode, rendering happens via the rich console and the process exits
      with status 1; otherwise, the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings. when
    not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "RegistrationError",
    "ParseError",
    "InvalidArgumentError",
    "NoArgumentsError",
    "CommandNotFoundError",
    "ParameterNotFoundError",
    "DuplicateParameterError",
    "MissingValueError",
    "MissingRequiredError",
    "ExtraArgumentsError",
    "ConversionError",
    "FaultCode",
    "trigger",
    "getdoc",
)
