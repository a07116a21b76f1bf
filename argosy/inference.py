"""
Token type inference.

Every raw token classifies as one of three concrete types, tried in order:
- int:    only digits ("42", "007")
- float:  optional sign, digits, optional dot and decimals ("-3", "2.", "+1.5")
- string: anything else

The order matters: integer-shaped tokens never classify as float. Note that a
signed integer ("-3") is float-shaped, since only the float form admits a sign.
"""
import re
from enum import StrEnum


class ArgType(StrEnum):
    """
    declared type of a flag argument or positional argument.

    ANY and STRING accept every token; INT and FLOAT require the inferred type
    of the token to match exactly.
    """
    ANY = "any"
    INT = "int"
    FLOAT = "float"
    STRING = "string"

    @classmethod
    def parse(cls, value, /):
        """
        return the ArgType for an ArgType or a case-insensitive type name.

        raises ValueError for anything outside {any, int, float, string}.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError("argument type must be one of %s" % ", ".join(cls))
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError("argument type %r must be one of %s" % (value, ", ".join(cls))) from None

    @property
    def permissive(self):
        """True when every token is accepted (any, string)."""
        return self in (ArgType.ANY, ArgType.STRING)


_INT = re.compile(r"[0-9]+")
_FLOAT = re.compile(r"[+-]?[0-9]+\.?[0-9]*")


def classify(token, /):
    """
    infer the ArgType of a raw token (never fails; the fallback is STRING).
    """
    if not isinstance(token, str):
        raise TypeError("classify() argument must be a string")
    if _INT.fullmatch(token):
        return ArgType.INT
    if _FLOAT.fullmatch(token):
        return ArgType.FLOAT
    return ArgType.STRING


def accepts(type, token, /):
    """
    tell whether a token satisfies a declared type.

    returns a (accepted, inferred) pair; inferred is None when the declared
    type is permissive and no inference was needed.
    """
    type = ArgType.parse(type)
    if type.permissive:
        return True, None
    inferred = classify(token)
    return inferred is type, inferred


__all__ = (
    "ArgType",
    "classify",
    "accepts",
)
