"""
Flagship faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault. Codes are
  grouped by domain so logs and searches stay predictable.
- OptionsFault: base type carrying a detail + options that knows how to render
  itself with rich in a friendly, lowercased and actionable way.
- trigger(): central entry point to surface a fault (print-and-exit in shell mode,
  raise otherwise).
- getdoc(): optional description lookup for a code from the host application.

Kind-of checks
- every fault class pins a single FaultCode; callers test the kind with
  isinstance(fault, NoSuchOptionError) or fault.code is FaultCode.NO_SUCH_OPTION,
  never by matching the message text.

Integration
- the scanner raises parse faults; invoke() routes them through trigger().
- the host application may tune rendering from its __main__ module:
  __prog__, __styles__, __codes__ and __docs__.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - registration (2110x): programming errors in the declaring application
      • DUPLICATE_OPTION, SHORT_AND_LONG_EMPTY, SHORT_OPTION_TOO_LONG
    - parsing (2111x): malformed user input
      • NO_SUCH_OPTION, OPTION_REQUIRES_VALUE, PARSING_VALUE
    """
    # --- registration errors (2110x) ---
    DUPLICATE_OPTION      = 21101
    SHORT_AND_LONG_EMPTY  = 21102
    SHORT_OPTION_TOO_LONG = 21103

    # --- parse errors (2111x) ---
    NO_SUCH_OPTION        = 21111
    OPTION_REQUIRES_VALUE = 21112
    PARSING_VALUE         = 21113

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class OptionsFault(Exception):
    """
    base class of every fault raised by flagship.

    attributes
    - code: FaultCode pinned by the concrete subclass.
    - title: short lowercase title, also the message prefix.
    - detail: free text, usually the offending token or option name.
    - options: read-only mapping with rendering context (hint, input, shell, ...).

    str(fault) is "<title>: <detail>" (or just the title when detail is empty).
    """
    code = None
    title = "options fault"
    hint = "run the program with --help to see the accepted options"

    def __init__(self, detail="", /, **options):
        assert isinstance(detail, str)
        self.detail = detail
        self.options = MappingProxyType(options)
        super().__init__(self.message)

    @property
    def message(self):
        return "%s: %s" % (self.title, self.detail) if self.detail else self.title

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

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

        prog = text(getattr(main, "__prog__", os.path.basename(sys.argv[0]) or "flagship"), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " - ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.title.title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint", self.hint), styler("hint")))

        if self.options.get("fancy", False):
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.detail, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class DuplicateOptionError(OptionsFault):
    code = FaultCode.DUPLICATE_OPTION
    title = "duplicate option"
    hint = "each long name and short character can be registered only once"


class ShortAndLongEmptyError(OptionsFault):
    code = FaultCode.SHORT_AND_LONG_EMPTY
    title = "long and short options both empty"
    hint = "give the option a long name, a short character, or both"


class ShortOptionTooLongError(OptionsFault):
    code = FaultCode.SHORT_OPTION_TOO_LONG
    title = "short option too long"
    hint = "short options are a single character; use a long name instead"


class NoSuchOptionError(OptionsFault):
    code = FaultCode.NO_SUCH_OPTION
    title = "no such option"


class OptionRequiresValueError(OptionsFault):
    code = FaultCode.OPTION_REQUIRES_VALUE
    title = "option requires value"
    hint = "pass the value after the option (for example: --name value or --name=value)"


class ParsingValueError(OptionsFault):
    code = FaultCode.PARSING_VALUE
    title = "failure parsing option value"
    hint = "check the value against the type the option expects"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see OptionsFault).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode the fault is rendered on stderr and the process exits with status 1;
      otherwise it is raised.

    typical options
    - shell, fancy, colorful, hint, input, and any other context the reporter may want to show.
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
    are FaultCode instances and values are short documentation strings.
    returns None when nothing is registered for the code.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "OptionsFault",
    "DuplicateOptionError",
    "ShortAndLongEmptyError",
    "ShortOptionTooLongError",
    "NoSuchOptionError",
    "OptionRequiresValueError",
    "ParsingValueError",
    "trigger",
    "getdoc",
)
