"""
commandtree parameters: declaration and matching of a command's parameter set.

Parameter kinds
- prefixed: addressed as --name or -s. Without a value slot it is a flag; with
  one, the following token is its value.
- raw: positional, bound by order to plain (non-dashed) tokens.

Registration invariants (violations raise RegistrationError, set unchanged)
- long names are non-empty and unique, short names are one character and unique;
- a required prefixed parameter carries a value slot;
- prefixed parameters precede raw ones;
- an optional raw parameter is the last parameter of the set, and only on a
  command without child commands.

Matching runs left to right through three phases: NAMED (prefixed parameters
and the first raw ones), RAW (only raw values are accepted) and DONE (the
remaining tokens belong to the command tree).
"""
import enum
import logging
from collections import deque

from .faults import (
    FaultCode,
    RegistrationError,
    InvalidArgumentError,
    ParameterNotFoundError,
    DuplicateParameterError,
    MissingValueError,
    MissingRequiredError,
    ConversionError,
)
from .tokens import ArgumentKind
from .utils import IntrospectableType

logger = logging.getLogger(__name__)


class _Phase(enum.Enum):
    NAMED = enum.auto()
    RAW = enum.auto()
    DONE = enum.auto()


def _settable(value):
    return callable(getattr(value, "set", None))


class Parameter(metaclass=IntrospectableType):
    """
    A single declared parameter plus its per-parse state.

    parsed and raw_value are reset before every parse; raw_value keeps the
    literal token that matched (the value token for value-bearing prefixed
    parameters, the stripped name for flags).
    """
    __introspectable__ = ("name", "short", "help", "required", "raw", "value", "parsed", "raw_value")
    __displayable__ = ("name", "short", "required", "raw", "parsed", "raw_value")

    def __init__(self, name, short="", help="", required=False, raw=False, value=None):
        self._name = name
        self._short = short
        self._help = help
        self._required = required
        self._raw = raw
        self._value = value
        self._parsed = False
        self._raw_value = None

    @property
    def prefixed(self):
        return not self._raw

    @property
    def usage(self):
        """usage token: <--name>, [--name], <name> or [name]"""
        name = self._name if self._raw else "--" + self._name
        return ("<%s>" if self._required else "[%s]") % name

    def reset(self):
        self._parsed = False
        self._raw_value = None


class Parameters:
    """
    Ordered parameter set owned by one command.

    Lookups are exact in two namespaces (long names and short names); iteration
    follows registration order.
    """

    def __init__(self, command=None, /):
        self._command = command
        self._long = {}
        self._short = {}

    @property
    def command(self):
        return self._command

    @property
    def last(self):
        """the most recently registered parameter, or None"""
        return next(reversed(self._long.values()), None)

    @property
    def has_optional_raw(self):
        return any(parameter.raw and not parameter.required for parameter in self)

    def add_param(self, name, short="", help="", required=False, value=None):
        """
        Register a prefixed parameter; returns the owning command for chaining.

        A required prefixed parameter needs a value slot.
        """
        self._register(name, short, help, required, False, value)
        return self._command

    def add_raw_param(self, name, help="", required=False, value=None):
        """
        Register a raw (positional) parameter; returns the owning command for chaining.
        """
        self._register(name, "", help, required, True, value)
        return self._command

    def _register(self, name, short, help, required, raw, value):
        def conflict(message, code):
            return RegistrationError(message, code=code)

        if not isinstance(name, str) or not isinstance(short, str) or not isinstance(help, str):
            raise conflict("parameter name, short name and help must be strings", FaultCode.INVALID_NAME)
        if not name or name.startswith("-"):
            raise conflict("invalid parameter name %r" % name, FaultCode.INVALID_NAME)
        if len(short) > 1 or short == "-":
            raise conflict("invalid short name %r for parameter %r" % (short, name), FaultCode.INVALID_NAME)
        if name in self._long:
            raise conflict("duplicate parameter name %r" % name, FaultCode.DUPLICATE_NAME)
        if short and short in self._short:
            raise conflict(
                "duplicate short name %r (already used by %r)" % (short, self._short[short].name),
                FaultCode.DUPLICATE_NAME
            )
        if raw and not required and self._command is not None and len(self._command.commands):
            raise conflict(
                "optional raw parameter %r on a command with subcommands" % name,
                FaultCode.AMBIGUOUS_RAW
            )
        if (last := self.last) is not None and last.raw:
            if not raw:
                raise conflict(
                    "prefixed parameter %r registered after raw parameter %r" % (name, last.name),
                    FaultCode.PARAMETER_ORDER
                )
            if not last.required:
                raise conflict(
                    "raw parameter %r registered after optional raw parameter %r" % (name, last.name),
                    FaultCode.PARAMETER_ORDER
                )
        if value is None and required and not raw:
            raise conflict("required parameter %r must have a value" % name, FaultCode.MISSING_VALUE_SLOT)
        if value is not None and not _settable(value):
            raise conflict(
                "value of parameter %r does not provide set(token)" % name,
                FaultCode.INVALID_VALUE_SLOT
            )

        parameter = Parameter(name, short, help, required, raw, value)
        self._long[name] = parameter
        if short:
            self._short[short] = parameter
        logger.debug("registered parameter %r", parameter)

    def get(self, name, /):
        return self._long.get(name)

    def parsed(self, name, /):
        """whether the parameter registered under name matched in the last parse"""
        parameter = self._long.get(name)
        return parameter is not None and parameter.parsed

    def value(self, name, /):
        """literal token matched by the parameter, "" when absent or unmatched"""
        parameter = self._long.get(name)
        if parameter is None or parameter.raw_value is None:
            return ""
        return parameter.raw_value

    def reset(self):
        for parameter in self:
            parameter.reset()

    def parse(self, session, /):
        """
        Match parameters against the session's leading tokens.

        Consumes every token it binds; stops at the first token it cannot
        place (which stays in the session), once every parameter matched or
        when the session is exhausted, then verifies that all required parameters were given.
        """
        if not self._long:
            return
        pending = deque(parameter for parameter in self if parameter.raw)
        phase = _Phase.NAMED

        while phase is not _Phase.DONE and session:
            text, kind = session.next()
            match kind:
                case ArgumentKind.NONE:
                    phase = _Phase.DONE
                    continue
                case ArgumentKind.INVALID:
                    raise InvalidArgumentError(
                        "invalid argument %r" % session.peek(),
                        input=session.peek(),
                        hint="use --name for long and -n for short parameters"
                    )
                case ArgumentKind.TEXT:
                    if not pending:
                        phase = _Phase.DONE
                        continue
                    phase = _Phase.RAW
                    parameter = pending.popleft()
                case _ if phase is _Phase.RAW:
                    phase = _Phase.DONE
                    continue
                case ArgumentKind.COMBINED:
                    self._combine(text)
                    session.skip()
                case ArgumentKind.LONG:
                    parameter = self._lookup(self._long, text, "--" + text)
                case ArgumentKind.SHORT:
                    parameter = self._lookup(self._short, text, "-" + text)
            if kind is not ArgumentKind.COMBINED:
                self._match(parameter, text, session)
            # all matched, leftovers go back to the tree
            if all(parameter.parsed for parameter in self):
                phase = _Phase.DONE

        for parameter in self:
            if parameter.required and not parameter.parsed:
                raise MissingRequiredError(
                    "required parameter %r not specified" % parameter.usage,
                    input=parameter.name,
                    hint="provide %s" % parameter.usage
                )

    def _lookup(self, namespace, text, token):
        parameter = namespace.get(text)
        if parameter is None or parameter.raw:
            raise ParameterNotFoundError(
                "unknown parameter %r" % token,
                input=token,
                hint="check the parameters accepted by %r" % self._owner()
            )
        return parameter

    def _combine(self, text):
        parameters = [self._lookup(self._short, character, "-" + character) for character in text]
        marked = set()
        for character, parameter in zip(text, parameters):
            if parameter.value is not None:
                raise MissingValueError(
                    "parameter '-%s' in %r requires a value and cannot be combined" % (character, "-" + text),
                    input="-" + text,
                    hint="pass '-%s' separately followed by its value" % character
                )
            if parameter.parsed or character in marked:
                raise DuplicateParameterError(
                    "duplicate parameter '-%s' in %r" % (character, "-" + text),
                    input="-" + text
                )
            marked.add(character)
        for character, parameter in zip(text, parameters):
            parameter._raw_value = character
            parameter._parsed = True
            logger.debug("matched combined short parameter %r", parameter.name)

    def _match(self, parameter, text, session):
        if parameter.parsed:
            raise DuplicateParameterError(
                "duplicate parameter %r" % session.peek(),
                input=session.peek(),
                hint="specify each parameter at most once"
            )
        if parameter.value is not None:
            if parameter.prefixed:
                token = session.peek()
                if not session.skip():
                    raise MissingValueError(
                        "parameter %r requires a value" % token,
                        input=token,
                        hint="follow %s with its value" % token
                    )
                text = session.peek()
            try:
                parameter.value.set(text)
            except Exception as exception:
                raise ConversionError(
                    "invalid value %r for parameter %r: %s" % (text, parameter.name, exception),
                    input=text,
                    hint="check the expected type of %s" % parameter.usage
                ) from exception
        parameter._raw_value = text
        parameter._parsed = True
        session.skip()
        logger.debug("matched parameter %r with %r", parameter.name, text)

    def _owner(self):
        return getattr(self._command, "name", "")

    def __getitem__(self, name, /):
        return self._long[name]

    def __contains__(self, name, /):
        return name in self._long

    def __iter__(self):
        return iter(self._long.values())

    def __len__(self):
        return len(self._long)

    def __repr__(self):
        return "parameters(%s)" % ", ".join(map(repr, self._long))


__all__ = (
    "Parameter",
    "Parameters",
)
