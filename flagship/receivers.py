r"""
Flagship value receivers and coercion.

Overview
- Receivers are caller-owned, writable slots an Option stores its converted value into.
  The set of kinds is closed:
  • Boolean: yes/no aware boolean.
  • String: verbatim text.
  • Int32 / Int64: base-10 signed integers with range checks.
  • UInt64: unsigned integer with automatic base detection (0x, 0o, 0b, leading 0).
  • SupportsUnmarshalText: any object with an unmarshal_text(text) method
    (the open extension point; IPAddress is the bundled one).

- coerce(receiver, text)
  • converts text by the receiver kind and writes it into the receiver.
  • raises ValueError on any conversion failure and leaves the receiver untouched.

Quick example:
    >>> port = UInt64()
    >>> coerce(port, "0x1f90")
    >>> port.value
    8080
"""
import ipaddress
import re
from typing import Protocol, runtime_checkable

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))

_YES = frozenset(("y", "Y", "YES", "yes"))
_NO = frozenset(("n", "N", "NO", "no"))

# (prefix, radix, digits); a base prefix may be followed by one leading '_' separator
_RADIXES = (
    (("0x", "0X"), 16, r"[0-9a-fA-F]"),
    (("0o", "0O"), 8, r"[0-7]"),
    (("0b", "0B"), 2, r"[01]"),
)


@runtime_checkable
class SupportsUnmarshalText(Protocol):
    """
    Capability of receivers that parse themselves from text.

    unmarshal_text(text) must update the object in place or raise ValueError.
    """

    def unmarshal_text(self, text, /): ...


class Receiver:
    """
    Base of the built-in receivers: a single mutable 'value' slot.
    """
    __slots__ = ("value",)
    __default__ = None

    def __init__(self, value=None, /):
        self.value = self.__default__ if value is None else value

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.value)

    def __rich_repr__(self):
        yield self.value

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.value == other.value

    __hash__ = None


class Boolean(Receiver):
    __slots__ = ()
    __default__ = False


class String(Receiver):
    __slots__ = ()
    __default__ = ""


class Int32(Receiver):
    __slots__ = ()
    __default__ = 0
    minimum, maximum = -2 ** 31, 2 ** 31 - 1


class Int64(Receiver):
    __slots__ = ()
    __default__ = 0
    minimum, maximum = -2 ** 63, 2 ** 63 - 1


class UInt64(Receiver):
    __slots__ = ()
    __default__ = 0
    minimum, maximum = 0, 2 ** 64 - 1


class IPAddress:
    """
    Text-unmarshal receiver for an IPv4 or IPv6 address.

    The parsed ipaddress object is available as 'address' (None until set);
    is_loopback/is_multicast and str() delegate to it.
    """
    __slots__ = ("address",)

    def __init__(self, address=None, /):
        self.address = None if address is None else ipaddress.ip_address(address)

    def unmarshal_text(self, text, /):
        self.address = ipaddress.ip_address(text)

    @property
    def is_loopback(self):
        return self.address is not None and self.address.is_loopback

    @property
    def is_multicast(self):
        return self.address is not None and self.address.is_multicast

    def __str__(self):
        return "" if self.address is None else str(self.address)

    def __repr__(self):
        return "IPAddress(%r)" % str(self)

    def __rich_repr__(self):
        yield str(self)


def receiver(object, /):
    """
    Validate that object belongs to the closed set of receiver kinds.

    Returns the object itself so it can be used inline; raises TypeError otherwise.
    """
    if isinstance(object, Boolean | String | Int32 | Int64 | UInt64 | SupportsUnmarshalText):
        return object
    raise TypeError("receiver must be Boolean, String, Int32, Int64, UInt64 or support unmarshal_text(), not %r" % type(object).__name__)


def _decimal(text, receiver):
    if not re.fullmatch(r"[+-]?[0-9]+", text):
        raise ValueError("invalid base-10 integer %r" % text)
    value = int(text)
    if not receiver.minimum <= value <= receiver.maximum:
        raise ValueError("integer %r out of range for %s" % (text, type(receiver).__name__))
    return value


def _unsigned(text, receiver):
    for prefixes, radix, digits in _RADIXES:
        if text.startswith(prefixes):
            body = text[2:]
            break
    else:
        if len(text) > 1 and text.startswith("0"):
            prefixes, radix, digits, body = ("0",), 8, r"[0-7]", text[1:]
        else:
            prefixes, radix, digits, body = (), 10, r"[0-9]", text

    # separators sit between digits; only a base prefix may be directly followed by one
    pattern = (r"_?" if prefixes else "") + r"(%s+_)*%s+" % (digits, digits)
    if not re.fullmatch(pattern, body):
        raise ValueError("invalid unsigned integer %r" % text)
    value = int(body.replace("_", ""), radix)
    if value > receiver.maximum:
        raise ValueError("integer %r out of range for %s" % (text, type(receiver).__name__))
    return value


def coerce(receiver, text, /):
    """
    Convert text and store it into receiver.

    Rules
    - Boolean: y/Y/YES/yes and n/N/NO/no are remapped first, then the usual
      1/t/T/TRUE/true/True and 0/f/F/FALSE/false/False literals are accepted.
    - String: stored verbatim.
    - Int32/Int64: optional sign then base-10 digits, range checked.
    - UInt64: no sign; 0x/0o/0b prefixes or a leading 0 select the base.
    - SupportsUnmarshalText: delegated; any exception from the delegate counts as failure.

    Raises
    - ValueError on any failure; the receiver keeps its previous value.
    """
    match receiver:
        case Boolean():
            if text in _YES:
                text = "true"
            elif text in _NO:
                text = "false"
            if text in _TRUE:
                receiver.value = True
            elif text in _FALSE:
                receiver.value = False
            else:
                raise ValueError("invalid boolean %r" % text)
        case String():
            receiver.value = text
        case Int32() | Int64():
            receiver.value = _decimal(text, receiver)
        case UInt64():
            receiver.value = _unsigned(text, receiver)
        case SupportsUnmarshalText():
            try:
                receiver.unmarshal_text(text)
            except ValueError:
                raise
            except Exception as exception:
                raise ValueError(str(exception) or type(exception).__name__) from exception
        case _:
            raise TypeError("unsupported receiver %r" % type(receiver).__name__)


__all__ = (
    "SupportsUnmarshalText",
    "Receiver",
    "Boolean",
    "String",
    "Int32",
    "Int64",
    "UInt64",
    "IPAddress",
    "receiver",
    "coerce",
)
