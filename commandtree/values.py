"""
commandtree value slots.

A value slot is anything exposing a callable set(token): the engine hands it
the literal token and wraps whatever it raises into a ConversionError. The
classes below are the built-in slots; hosts are free to pass their own.

    >>> port = Integer(8080)
    >>> port.set("9000")
    >>> port.value
    9000
"""
import datetime
import re

from .utils import IntrospectableType, Unset, coalesce

_BOOLEANS = {
    "1": True, "t": True, "true": True,
    "0": False, "f": False, "false": False,
}

_DURATION = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def _boolean(token):
    try:
        return _BOOLEANS[token.lower()]
    except KeyError:
        raise ValueError("invalid boolean %r" % token) from None


def _duration(token):
    """parse a signed sequence of decimal numbers with units, e.g. "1h30m" or "-1.5s"."""
    sign, body = (-1, token[1:]) if token.startswith("-") else (1, token.removeprefix("+"))
    if body == "0":
        return datetime.timedelta()
    if not body or _DURATION.sub("", body):
        raise ValueError("invalid duration %r" % token)
    seconds = sum(float(number) * _UNITS[unit] for number, unit in _DURATION.findall(body))
    return datetime.timedelta(seconds=sign * seconds)


class Value(metaclass=IntrospectableType):
    """
    Generic slot converting tokens through an arbitrary callable.

    value holds the last converted token (or the default before any set) and
    assigned tells whether set() ever succeeded.
    """
    __introspectable__ = ("value", "default", "assigned")
    kind = "value"

    def __init__(self, type=str, default=None, /):
        if not callable(type):
            raise TypeError("Value() type must be callable")
        self._type = type
        self._default = default
        self._value = default
        self._assigned = False

    def convert(self, token, /):
        return self._type(token)

    def set(self, token, /):
        if not isinstance(token, str):
            raise TypeError("set() argument must be a string")
        self._value = self.convert(token)
        self._assigned = True

    def clear(self):
        """forget any assigned value and fall back to the default"""
        self._value = self._default
        self._assigned = False


class String(Value):
    kind = "string"

    def __init__(self, default=None, /):
        super().__init__(str, default)


class Integer(Value):
    kind = "int"

    def __init__(self, default=None, /):
        super().__init__(int, default)


class Float(Value):
    kind = "float"

    def __init__(self, default=None, /):
        super().__init__(float, default)


class Boolean(Value):
    """accepts 1/0, t/f and true/false in any case"""
    kind = "bool"

    def __init__(self, default=None, /):
        super().__init__(_boolean, default)


class Duration(Value):
    """
    Unit-suffixed duration converted to datetime.timedelta.

    Units: ns, us (µs), ms, s, m, h. Fractions and a leading sign are allowed,
    components may be chained ("2h45m"). A bare "0" is the zero duration.
    """
    kind = "duration"

    def __init__(self, default=None, /):
        super().__init__(_duration, default)


class Choice(Value):
    """String slot restricted to a fixed set of tokens."""
    __introspectable__ = ("value", "default", "assigned", "choices")
    kind = "choice"

    def __init__(self, *choices, default=Unset):
        if not choices:
            raise TypeError("Choice() requires at least one choice")
        if not all(isinstance(choice, str) for choice in choices):
            raise TypeError("Choice() choices must be strings")
        self._choices = choices
        super().__init__(str, coalesce(default))

    def convert(self, token, /):
        if token not in self._choices:
            raise ValueError("invalid choice %r (choose from %s)" % (
                token, ", ".join(map(repr, self._choices))
            ))
        return token


__all__ = (
    "Value",
    "String",
    "Integer",
    "Float",
    "Boolean",
    "Duration",
    "Choice",
)
