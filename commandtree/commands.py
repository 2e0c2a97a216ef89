"""
commandtree command layer: declare a command tree, resolve tokens, run handlers.

What this module provides
- Command: a named node owning a parameter set, child commands and an optional
  handler. Raw commands (or handler-bearing commands without parameters)
  capture the tokens left over after their parameters.
- Commands: an ordered scope of sibling commands; resolve() is the recursive
  matcher walking tokens down the tree.
- Session: the per-parse cursor over the tokens plus the matched chain.
- Context: what a handler receives (name, executed, parameter state, captures).
- Parser: the root scope with presentation flags; parse() raises faults,
  __invoke__() routes them through faults.trigger().
- parse(tokens, commands) / invoke(parser, prompt): module-level entry points.

Quick start
    from commandtree import Parser, Integer, invoke

    parser = Parser("tool", shell=True)
    parser.add_command("", "global options").add_param("verbose", "v", "chatty output")
    serve = parser.add_command("serve", "start the server", lambda context: print(context.value("port")))
    serve.add_param("port", "p", "listen port", True, Integer())

    invoke(parser, "-v serve --port 8080")

Resolution rules
- a plain token names a command of the current scope; the match then descends
  into that command's children.
- a dashed token in a scope that registered the empty-named command selects
  that "global" command without consuming the token; its parameters take the
  dashed tokens and the same scope is resolved again.
- handlers run after the whole input is consumed, root to leaf; only the last
  matched command sees executed == True.
"""
import enum
import logging
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from .faults import (
    FaultCode,
    CommandException,
    RegistrationError,
    InvalidArgumentError,
    NoArgumentsError,
    CommandNotFoundError,
    ParameterNotFoundError,
    ExtraArgumentsError,
    trigger,
)
from .parameters import Parameters
from .printer import render_text, render_tree
from .tokens import ArgumentKind, classify
from .utils import IntrospectableType, Unset, coalesce

logger = logging.getLogger(__name__)


class CommandKind(enum.Enum):
    """how a command treats tokens left over after its parameters"""
    STRUCTURED = "structured"
    CAPTURING = "capturing"
    RAW = "raw"


class Command(metaclass=IntrospectableType):
    """
    A node of the command tree.

    The scope that created a command keeps it; the command in turn owns its
    Parameters and its child Commands. arguments holds the tokens captured
    during the last parse.
    """
    __introspectable__ = ("name", "help", "handler", "raw", "arguments")
    __displayable__ = ("name", "help", "raw", "parameters", "commands")

    def __init__(self, name, help="", handler=None, raw=False, /, *, scope=None):
        self._name = name
        self._help = help
        self._handler = handler
        self._raw = raw
        self._scope = scope
        self._parameters = Parameters(self)
        self._commands = Commands(self)
        self._arguments = []

    @property
    def parameters(self):
        return self._parameters

    @property
    def commands(self):
        return self._commands

    @property
    def scope(self):
        """the Commands scope this command is registered in"""
        return self._scope

    @property
    def parent(self):
        """the command owning this command's scope, None at the root"""
        return getattr(self._scope, "parent", None)

    @property
    def path(self):
        """names from the root down to this command"""
        if (parent := self.parent) is None:
            return [self._name]
        return parent.path + [self._name]

    @property
    def kind(self):
        if self._raw:
            return CommandKind.RAW
        if not self._parameters and self._handler is not None:
            return CommandKind.CAPTURING
        return CommandKind.STRUCTURED

    @property
    def captures(self):
        """whether leftover tokens become this command's arguments"""
        return self.kind is not CommandKind.STRUCTURED

    def add_command(self, name, help="", handler=None):
        return self._commands.add_command(name, help, handler)

    def add_raw_command(self, name, help="", handler=None):
        return self._commands.add_raw_command(name, help, handler)

    def get_command(self, name, /):
        return self._commands.get_command(name)

    def add_param(self, name, short="", help="", required=False, value=None):
        return self._parameters.add_param(name, short, help, required, value)

    def add_raw_param(self, name, help="", required=False, value=None):
        return self._parameters.add_raw_param(name, help, required, value)

    def reset(self):
        self._parameters.reset()
        self._arguments.clear()
        self._commands.reset()

    def print(self):
        return render_text(self)

    def __rich__(self):
        return render_tree(self)


class Commands:
    """
    Ordered scope of sibling commands.

    The root scope has no parent; only there may the empty-named (global)
    command be registered.
    """

    def __init__(self, parent=None, /):
        self._parent = parent
        self._commands = {}

    @property
    def parent(self):
        return self._parent

    @property
    def is_root(self):
        return self._parent is None

    def add_command(self, name, help="", handler=None):
        """Register a child command; returns the new command."""
        return self._register(name, help, handler, False)

    def add_raw_command(self, name, help="", handler=None):
        """Register a command capturing all unmatched tokens; a handler is mandatory."""
        if handler is None:
            raise RegistrationError("raw command %r requires a handler" % name, code=FaultCode.MISSING_HANDLER)
        return self._register(name, help, handler, True)

    def _register(self, name, help, handler, raw):
        if not isinstance(name, str) or not isinstance(help, str):
            raise RegistrationError("command name and help must be strings", code=FaultCode.INVALID_NAME)
        if handler is not None and not callable(handler):
            raise RegistrationError("handler of command %r must be callable" % name, code=FaultCode.MISSING_HANDLER)
        if name in self._commands:
            raise RegistrationError(
                "duplicate command %r" % name if name else "duplicate global command",
                code=FaultCode.DUPLICATE_COMMAND
            )
        if not name and not self.is_root:
            raise RegistrationError(
                "global command under %r: only the root may register an empty name" % self._parent.name,
                code=FaultCode.INVALID_NAME
            )
        if name.startswith("-"):
            raise RegistrationError("invalid command name %r" % name, code=FaultCode.INVALID_NAME)
        if self._parent is not None:
            if self._parent.raw:
                raise RegistrationError(
                    "command %r under raw command %r" % (name, self._parent.name),
                    code=FaultCode.AMBIGUOUS_RAW
                )
            if self._parent.parameters.has_optional_raw:
                raise RegistrationError(
                    "command %r under %r, which has an optional raw parameter" % (name, self._parent.name),
                    code=FaultCode.AMBIGUOUS_RAW
                )

        command = Command(name, help, handler, raw, scope=self)
        self._commands[name] = command
        logger.debug("registered command %r", command.path)
        return command

    def get_command(self, name, /):
        return self._commands.get(name)

    def reset(self):
        """clear per-parse state of every command and parameter below this scope"""
        for command in self:
            command.reset()

    def resolve(self, session, /):
        """
        Consume session tokens against this scope and the scopes below it.

        Raises a ParseError subclass when the tokens cannot be placed.
        """
        text, kind = session.next()
        match kind:
            case ArgumentKind.NONE if session:
                raise InvalidArgumentError("empty argument", input="", hint="remove the empty argument")
            case ArgumentKind.NONE:
                if session.matches or not self._commands:
                    return
                raise NoArgumentsError("no arguments", hint=self._suggestions())
            case ArgumentKind.INVALID:
                raise InvalidArgumentError(
                    "invalid argument %r" % session.peek(),
                    input=session.peek(),
                    hint="use --name for long and -n for short parameters"
                )
            case ArgumentKind.TEXT:
                glob = False
                command = self._commands.get(text)
            case _:
                glob = True
                command = self._commands.get("")

        if command is None:
            return self._fallback(session, kind)

        if not glob:
            session.skip()
        remaining = len(session)
        command.parameters.parse(session)
        session.match(command)

        if not glob:
            return command.commands.resolve(session)
        if len(session) < remaining:
            return self.resolve(session)
        if not command.captures:
            raise ParameterNotFoundError(
                "unknown parameter %r" % session.peek(),
                input=session.peek(),
                hint="the global command declares no parameters"
            )
        session.capture(command)

    def _fallback(self, session, kind):
        last = session.last
        if last is not None and last.captures:
            return session.capture(last)
        token = session.peek()
        if kind is ArgumentKind.TEXT and (self._commands or last is None):
            raise CommandNotFoundError(
                "unknown %s %r" % ("command" if self.is_root else "subcommand", token),
                input=token,
                hint=self._suggestions()
            )
        if last is None or self._commands:
            raise CommandNotFoundError(
                "expected a command, got %s %r" % (kind.describe(), token),
                input=token,
                hint=self._suggestions()
            )
        raise ExtraArgumentsError(
            "unexpected argument %r after command %r" % (token, last.name),
            input=token,
            hint="remove the extra arguments" if last.handler is not None or last.parameters
            else "command %r has no handler to receive arguments" % last.name
        )

    def _suggestions(self):
        names = [name for name in self._commands if name]
        if not names:
            return "no commands are available here"
        return "expected one of: %s" % ", ".join(map(repr, names))

    def print(self):
        return render_text(self)

    def __rich__(self):
        return render_tree(self)

    def __getitem__(self, name, /):
        return self._commands[name]

    def __contains__(self, name, /):
        return name in self._commands

    def __iter__(self):
        return iter(self._commands.values())

    def __len__(self):
        return len(self._commands)

    def __repr__(self):
        return "commands(%s)" % ", ".join(map(repr, self._commands))


class Session:
    """
    Cursor over the tokens of one parse, plus the chain of matched commands.
    """

    def __init__(self, tokens=(), /):
        self._tokens = deque(tokens)
        self._matches = []

    @property
    def tokens(self):
        """tokens not consumed yet"""
        return list(self._tokens)

    @property
    def matches(self):
        return list(self._matches)

    @property
    def last(self):
        return self._matches[-1] if self._matches else None

    def next(self):
        """classify the current token without consuming it"""
        return classify(self._tokens)

    def peek(self):
        return self._tokens[0] if self._tokens else ""

    def skip(self):
        """consume the current token; returns whether tokens remain"""
        if self._tokens:
            self._tokens.popleft()
        return bool(self._tokens)

    def match(self, command, /):
        self._matches.append(command)
        logger.debug("matched command %r", command.path)

    def capture(self, command, /):
        command._arguments.extend(self._tokens)
        logger.debug("command %r captured %r", command.path, list(self._tokens))
        self._tokens.clear()

    def visit(self):
        """
        Call every matched handler root to leaf.

        The last matched command runs with executed == True, the others with
        False. Handler exceptions propagate unchanged and stop the walk.
        """
        for index, command in enumerate(self._matches, 1):
            if command.handler is None:
                continue
            command.handler(Context(command, index == len(self._matches)))

    def __len__(self):
        return len(self._tokens)

    def __bool__(self):
        return bool(self._tokens)

    def __repr__(self):
        return "session(tokens=%r, matches=%r)" % (list(self._tokens), [command.name for command in self._matches])


class Context(metaclass=IntrospectableType):
    """What a handler sees of its command after a successful parse."""
    __introspectable__ = ("name", "executed")

    def __init__(self, command, executed, /):
        self._command = command
        self._name = command.name
        self._executed = executed

    @property
    def command(self):
        return self._command

    @property
    def arguments(self):
        return self._command.arguments

    def parsed(self, name, /):
        return self._command.parameters.parsed(name)

    def value(self, name, /):
        return self._command.parameters.value(name)

    def print(self):
        return self._command.print()


def _execute(commands, session):
    commands.reset()
    commands.resolve(session)
    session.visit()
    return session


def _tokenize(tokens, caller):
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("%s() argument must be an iterable of strings" % caller)
    tokens = list(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("%s() argument must be an iterable of strings" % caller)
    return tokens


class Parser(metaclass=IntrospectableType):
    """
    Root of a command tree with its presentation flags.

    Options
    - name: program name used in fault headers (defaults to sys.argv[0]'s basename).
    - shell: render faults on stderr and exit(1) instead of raising them (invoke only).
    - fancy: render faults inside a panel.
    - colorful: style faults with the palette (overridable via __main__.__styles__).
    """
    __introspectable__ = ("name", "shell", "fancy", "colorful")

    def __init__(self, name=Unset, /, *, shell=False, fancy=False, colorful=False):
        name = coalesce(name, os.path.basename(sys.argv[0]))
        if not isinstance(name, str):
            raise TypeError("Parser() name must be a string")
        self._name = name
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._commands = Commands()
        self._session = None
        self._resolved = False

    @property
    def commands(self):
        return self._commands

    @property
    def session(self):
        """the session of the most recent parse, None before any"""
        return self._session

    @property
    def arguments(self):
        """tokens left unconsumed by the most recent parse"""
        return [] if self._session is None else self._session.tokens

    def add_command(self, name, help="", handler=None):
        return self._commands.add_command(name, help, handler)

    def add_raw_command(self, name, help="", handler=None):
        return self._commands.add_raw_command(name, help, handler)

    def get_command(self, name, /):
        return self._commands.get_command(name)

    def parse(self, tokens, /):
        """
        Resolve tokens against the tree and run the matched handlers.

        Returns the Session. Faults and handler exceptions propagate; the
        failed session stays available as self.session.
        """
        self._session = session = Session(_tokenize(tokens, "parse"))
        self._resolved = False
        self._commands.reset()
        self._commands.resolve(session)
        self._resolved = True
        session.visit()
        return session

    def visit(self):
        """run the handlers of the most recent parse again"""
        if self._session is None:
            raise RuntimeError("visit() called before parse()")
        if not self._resolved:
            raise RuntimeError("visit() called after a failed parse()")
        self._session.visit()

    def trigger(self, fault, /, **options):
        trigger(fault, **options, tool=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful)

    def print(self):
        return render_text(self._commands)

    def __rich__(self):
        return render_tree(self)

    def __invoke__(self, prompt=Unset):
        """
        Parse a prompt and surface faults according to the presentation flags.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence; each element is trimmed and
            empty elements are dropped.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = [token.strip() for token in _tokenize(prompt, "__invoke__") if token.strip()]
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            return self.parse(tokens)
        except CommandException as exception:
            fault = exception
        self.trigger(fault)


def parse(tokens, commands, /):
    """
    Resolve tokens against a standalone Commands tree and run the handlers.

    Returns the Session; faults propagate as raised.
    """
    if not isinstance(commands, Commands):
        raise TypeError("parse() second argument must be a commands tree")
    return _execute(commands, Session(_tokenize(tokens, "parse")))


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for parsers.

    Parameters
    - object: an instance providing __invoke__(prompt), typically a Parser.
    - prompt: Unset (sys.argv[1:]), a shell-like string or an iterable of strings.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "CommandKind",
    "Command",
    "Commands",
    "Session",
    "Context",
    "Parser",
    "parse",
    "invoke",
)
