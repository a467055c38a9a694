r"""
Flagship option declarations, registry and scanner.

Overview
- Option: one recognized flag (long '--name' and/or short '-n'), optionally value-bearing,
  optionally writing into a receiver and/or calling a handler.
- Options: the registry of declared options plus the single-pass scanner.
  • register(*options): build the table (uniqueness and shape checks).
  • parse(args): scan leading option tokens, return the residual tail.
  • reset(): clear the transient seen/raw_value state of every option.
- invoke(options, prompt): parse and surface faults through trigger().

Token grammar accepted by parse()
- '--'                 terminator; consumed, everything after is residual.
- '--name'             long option; its value (if any) is the next token.
- '--name=value'       long option with inline value (value-bearing options only).
- '-n'                 short option; its value (if any) is the next token.
- '-nvalue', '-n=value' short option with inline value ('=' is stripped unless '=' is itself a short option).
- '-abc'               cluster of no-value short options, same as '-a -b -c'.
- anything else        first non-option token; scanning stops there.

Non-transactional by contract
- register() keeps the options added before a failing one.
- parse() keeps seen/raw_value of the options matched before a failing token.

Quick example:
    >>> from flagship import Options, Option, Int32
    >>> count = Int32()
    >>> verbose = Option(long="verbose", short="v")
    >>> options = Options()
    >>> options.register(verbose, Option(long="count", short="c", receiver=count))
    >>> options.parse(["-vc3", "file.txt"])
    ['file.txt']
    >>> verbose.seen, count.value
    (True, 3)
"""
import functools
import operator
import shlex
import sys
from collections.abc import Iterable
from threading import Lock
from types import MappingProxyType

from .faults import *
from .receivers import coerce, receiver as _receiver
from .utils import *


class Option:
    """
    Declaration of a single recognized option.

    Options are registered by reference: the very instance handed to Options.register()
    is the one parse() updates, so callers read seen/raw_value straight from it.

    Attributes
    - long: str | None, long name without the leading '--'.
    - short: str | None, single character without the leading '-'.
    - has_value: bool, the option consumes a value (forced True when a receiver is set).
    - value_name: str | None, label of the value for help output.
    - receiver: Boolean | String | Int32 | Int64 | UInt64 | SupportsUnmarshalText | None.
    - handler: Callable[[str], Any] | None, called with the raw value after coercion.
    - descr: str | None, short help text.
    - seen: bool, matched during the last parse.
    - raw_value: str, raw text of the last value matched.
    """
    __displayable__ = ("long", "short", "has_value", "value_name", "receiver", "descr", "seen", "raw_value")

    def __init__(
            self,
            *,
            long=Unset,
            short=Unset,
            has_value=False,
            value_name=Unset,
            receiver=Unset,
            handler=Unset,
            descr=Unset
    ):
        if not isinstance(long, str | None | Unset):
            raise TypeError("option 'long' must be a string")
        if not isinstance(short, str | None | Unset):
            raise TypeError("option 'short' must be a string")
        if not isinstance(value_name, str | None | Unset):
            raise TypeError("option 'value_name' must be a string")
        if not isinstance(descr, str | None | Unset):
            raise TypeError("option 'descr' must be a string")
        if coalesce(handler) is not None and not callable(handler):
            raise TypeError("option 'handler' must be callable")

        # empty names count as absent
        self.long = coalesce(long) or None
        self.short = coalesce(short) or None
        self.has_value = bool(has_value)
        self.value_name = coalesce(value_name)
        self.receiver = coalesce(receiver)
        self.handler = coalesce(handler)
        self.descr = coalesce(descr)
        self.seen = False
        self.raw_value = ""

    def __repr__(self):
        return "option(%s)" % ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))

    def __rich_repr__(self):
        for name in self.__displayable__:
            yield name, getattr(self, name)


class Options:
    """
    Registry of declared options and the argument scanner.

    The long/short tables are created lazily, exactly once, on the first call to any
    public method; that first initialization is safe across threads. Nothing else is
    synchronized: concurrent parse()/register()/reset() calls on the same registry race
    on the options' seen/raw_value state.
    """

    def __init__(self):
        self._lock = Lock()
        self._long = Unset
        self._short = Unset

    def _init(self):
        # double-checked: _long is published last, so seeing it set means both exist
        if self._long is Unset:
            with self._lock:
                if self._long is Unset:
                    self._short = {}
                    self._long = {}

    @property
    def long(self):
        """read-only view: long name -> Option."""
        self._init()
        return MappingProxyType(self._long)

    @property
    def short(self):
        """read-only view: short character -> Option."""
        self._init()
        return MappingProxyType(self._short)

    def register(self, *options):
        """
        Add options to the table, in the order given.

        Per option
        - ShortAndLongEmptyError if neither long nor short is set (the option is not added).
        - has_value is forced True when a receiver is attached (TypeError for unknown receivers).
        - DuplicateOptionError if the long name is taken; its detail is the option's short
          form (if any) and the long form travels as the 'input' fault option.
        - ShortOptionTooLongError if short has more than one character.
        - DuplicateOptionError if the short character is taken.
        - seen/raw_value are reset.

        Registration stops at the first failure; options added before it stay registered.
        """
        self._init()
        for option in options:
            if not option.long and not option.short:
                raise ShortAndLongEmptyError()
            if option.receiver is not None:
                _receiver(option.receiver)
                option.has_value = True
            if option.long:
                if option.long in self._long:
                    raise DuplicateOptionError(option.short or "", input="--" + option.long)
                self._long[option.long] = option
            if option.short:
                if len(option.short) > 1:
                    raise ShortOptionTooLongError(option.short, input="-" + option.short)
                if option.short in self._short:
                    raise DuplicateOptionError(option.short, input="-" + option.short)
                self._short[option.short] = option
            option.seen = False
            option.raw_value = ""

    def reset(self):
        """
        Clear seen/raw_value on every registered option; idempotent.
        """
        self._init()
        for option in (*self._long.values(), *self._short.values()):
            option.seen = False
            option.raw_value = ""

    def parse(self, args=Unset, /):
        """
        Scan leading option tokens of args and return the residual tail.

        args
        - Unset: read sys.argv[1:].
        - str: split shell-style with shlex.split.
        - Iterable[str]: used as-is (never mutated).

        Returns
        - list[str]: tokens left after the terminator or from the first non-option token
          on; empty when everything was consumed.

        Raises
        - NoSuchOptionError: unknown long/short option (detail: the token).
        - OptionRequiresValueError: value-bearing option at the end of input.
        - ParsingValueError: the receiver rejected the value (chained to the cause).
        - whatever an option handler raises, unchanged.
        """
        self._init()
        tokens = _tokenize(args)

        index = 0
        # synthetic token standing in for tokens[index] (inline value or cluster remainder)
        pending = Unset

        while index < len(tokens):
            token = tokens[index] if pending is Unset else pending
            option = None

            if token == "--":
                index, pending = index + 1, Unset
                break
            if not token.startswith("-"):
                break

            if token.startswith("--"):
                name = token[2:]
                if (option := self._long.get(name)) is not None:
                    index, pending = index + 1, Unset
                else:
                    # --name=value, only for value-bearing options
                    name, separator, value = name.partition("=")
                    option = self._long.get(name) if separator else None
                    if option is not None and option.has_value:
                        pending = value
                    else:
                        option = None
            else:
                name = token[1:]
                if (option := self._short.get(name[:1])) is not None:
                    if len(name) == 1:
                        index, pending = index + 1, Unset
                    elif option.has_value:
                        # -x=value, unless '=' is a short option of its own
                        if name[1] == "=" and "=" not in self._short:
                            pending = name[2:]
                        else:
                            pending = name[1:]
                    else:
                        # cluster: rescan the remaining characters in place
                        pending = "-" + name[1:]

            if option is None:
                raise NoSuchOptionError(token, input=token)

            value = ""
            if option.has_value:
                if pending is Unset and index >= len(tokens):
                    raise OptionRequiresValueError(token, input=token)
                value = tokens[index] if pending is Unset else pending
                index, pending = index + 1, Unset

            option.seen = True
            if option.has_value:
                option.raw_value = value
                if option.receiver is not None:
                    try:
                        coerce(option.receiver, value)
                    except ValueError as exception:
                        raise ParsingValueError(token, input=token, value=value) from exception

            # handler runs only after the value was accepted
            if option.handler is not None:
                option.handler(value)

        return list(tokens[index:])

    def __repr__(self):
        return "options(%s)" % ", ".join(map(repr, self.__rich_repr__()))

    def __rich_repr__(self):
        self._init()
        # an option holding both forms is listed once
        yield from dict.fromkeys((*self._long.values(), *self._short.values()))


def _tokenize(args):
    """
    Normalize the accepted argument shapes into a tuple of strings.
    """
    if args is Unset:
        return tuple(sys.argv[1:])
    if isinstance(args, str):
        return tuple(shlex.split(args))
    if isinstance(args, Iterable):
        tokens = tuple(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argument must be a string or an iterable of strings")


def invoke(options, prompt=Unset, /, *, shell=True, fancy=False, colorful=True):
    """
    Convenience runner for command-line entry points.

    Parses prompt with options.parse() and hands any OptionsFault to trigger():
    in shell mode the fault is rendered on stderr (rich) and the process exits with
    status 1; otherwise the fault is raised. Handler exceptions are not intercepted.

    Returns
    - list[str]: the residual arguments.
    """
    if not isinstance(options, Options):
        raise TypeError("invoke() first argument must be an Options registry")
    try:
        return options.parse(prompt)
    except OptionsFault as fault:
        trigger(fault, shell=shell, fancy=fancy, colorful=colorful)


__all__ = (
    "Option",
    "Options",
    "invoke",
)
