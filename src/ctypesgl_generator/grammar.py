"""Type grammar for registry declarations.

A ``<param>`` or ``<proto>`` element mixes free text with typed leaves::

    <param>const <ptype>GLchar</ptype> *const*<name>path</name></param>

The declared name comes from the ``<name>`` leaf. Everything else is joined
in document order, with the ``GL`` prefix removed from typed leaves, and run
through a small lexer. The resulting token stream must match one of the
shapes in ``_MODIFIERS``; the remaining keyword is looked up in
``BASE_TYPES``.
"""

import re
import xml.etree.ElementTree as ET
from typing import NamedTuple, Optional

from .types import BaseType, TypeDescriptor, TypeModifier

NAMESPACE_PREFIX = "GL"

CONST = "const"
STAR = "star"
WORD = "word"

_TOKEN_RE = re.compile(r"\*|[A-Za-z_][A-Za-z0-9_]*|\S")

# Keywords as they appear after the namespace prefix is stripped.
BASE_TYPES = {
    "boolean": BaseType.BOOLEAN,
    "uint": BaseType.UINT32,
    "enum": BaseType.UINT32,
    "bitfield": BaseType.UINT32,
    "int": BaseType.INT32,
    "sizei": BaseType.INT32,
    "fixed": BaseType.INT32,
    "clampx": BaseType.INT32,
    "float": BaseType.FLOAT32,
    "clampf": BaseType.FLOAT32,
    "double": BaseType.FLOAT64,
    "clampd": BaseType.FLOAT64,
    "ubyte": BaseType.UINT8,
    "byte": BaseType.INT8,
    "ushort": BaseType.UINT16,
    "half": BaseType.UINT16,
    "halfARB": BaseType.UINT16,
    "halfNV": BaseType.UINT16,
    "short": BaseType.INT16,
    "uint64": BaseType.UINT64,
    "uint64EXT": BaseType.UINT64,
    "int64": BaseType.INT64,
    "int64EXT": BaseType.INT64,
    "char": BaseType.CHAR,
    "charARB": BaseType.CHAR,
    "intptr": BaseType.ADDRESS,
    "intptrARB": BaseType.ADDRESS,
    "sizeiptr": BaseType.ADDRESS,
    "sizeiptrARB": BaseType.ADDRESS,
    "sync": BaseType.ADDRESS,
    "eglImageOES": BaseType.ADDRESS,
    "eglClientBufferEXT": BaseType.ADDRESS,
    "DEBUGPROC": BaseType.ADDRESS,
    "DEBUGPROCARB": BaseType.ADDRESS,
    "DEBUGPROCKHR": BaseType.ADDRESS,
    "DEBUGPROCAMD": BaseType.ADDRESS,
    "VULKANPROCNV": BaseType.ADDRESS,
    "void": BaseType.VOID,
}

# (leading const, suffix after the base keyword) -> modifier
_MODIFIERS = {
    (False, ""): TypeModifier.NONE,
    (False, "*"): TypeModifier.POINTER_TO,
    (True, "*"): TypeModifier.POINTER_TO_CONST,
    (False, "**"): TypeModifier.POINTER_TO_POINTER,
    (True, "**"): TypeModifier.POINTER_TO_CONST_POINTER,
    (False, "*const*"): TypeModifier.POINTER_TO_CONST,
    (True, "*const*"): TypeModifier.POINTER_TO_CONST_POINTER_TO_CONST,
}


class DeclarationError(ValueError):
    """A declaration does not have the structure the grammar expects."""


class Token(NamedTuple):
    kind: str
    text: str


def strip_prefix(keyword: str) -> str:
    if keyword.startswith(NAMESPACE_PREFIX):
        return keyword[len(NAMESPACE_PREFIX):]
    return keyword


def split_declaration(element: ET.Element) -> tuple[str, str, str]:
    """Separate the declared name from the type text of *element*.

    Returns ``(name, type_text, raw_text)``: ``type_text`` has the namespace
    prefix removed from typed leaves, ``raw_text`` keeps them verbatim.
    """
    name: Optional[str] = None
    type_parts = [element.text or ""]
    raw_parts = [element.text or ""]

    for child in element:
        if child.tag == "name":
            name = (child.text or "").strip()
        else:
            leaf = (child.text or "").strip()
            type_parts.append(strip_prefix(leaf))
            raw_parts.append(leaf)
        type_parts.append(child.tail or "")
        raw_parts.append(child.tail or "")

    if not name:
        raise DeclarationError(
            f"<{element.tag}> declaration is missing its <name> leaf: "
            f"{''.join(element.itertext()).strip()!r}"
        )

    return name, "".join(type_parts), "".join(raw_parts)


def tokenize(text: str) -> list[Token]:
    """Split normalized type text into CONST, STAR and WORD tokens."""
    tokens = []
    for match in _TOKEN_RE.finditer(text):
        lexeme = match.group()
        if lexeme == "*":
            tokens.append(Token(STAR, lexeme))
        elif lexeme == "const":
            tokens.append(Token(CONST, lexeme))
        elif lexeme[0].isalpha() or lexeme[0] == "_":
            tokens.append(Token(WORD, lexeme))
        else:
            raise DeclarationError(f"Unexpected {lexeme!r} in type {text.strip()!r}")
    return tokens


def _split_base(tokens: list[Token], text: str) -> tuple[bool, list[str], str]:
    leading_const = bool(tokens) and tokens[0].kind == CONST
    rest = tokens[1:] if leading_const else tokens

    words = []
    while len(words) < len(rest) and rest[len(words)].kind == WORD:
        words.append(rest[len(words)].text)
    if not words:
        raise DeclarationError(f"No base type in {text.strip()!r}")

    suffix = rest[len(words):]
    if any(token.kind == WORD for token in suffix):
        raise DeclarationError(f"Unexpected keyword in type {text.strip()!r}")

    return leading_const, words, "".join(
        "*" if token.kind == STAR else "const" for token in suffix
    )


def _modifier_for(leading_const: bool, suffix: str, text: str) -> TypeModifier:
    try:
        return _MODIFIERS[(leading_const, suffix)]
    except KeyError:
        raise DeclarationError(
            f"Unsupported pointer/const arrangement in {text.strip()!r}"
        ) from None


def classify_modifier(tokens: list[Token], text: str = "") -> TypeModifier:
    leading_const, _, suffix = _split_base(tokens, text)
    return _modifier_for(leading_const, suffix, text)


def parse_type_text(text: str, raw_text: Optional[str] = None) -> TypeDescriptor:
    """Classify already-normalized type text such as ``"const char *const*"``."""
    leading_const, words, suffix = _split_base(tokenize(text), text)
    modifier = _modifier_for(leading_const, suffix, text)

    keyword = " ".join(words)
    raw = keyword
    if raw_text is not None:
        raw = " ".join(_split_base(tokenize(raw_text), raw_text)[1])

    base_type = BASE_TYPES.get(keyword, BaseType.UNRECOGNIZED)

    if base_type is BaseType.VOID and modifier is not TypeModifier.NONE:
        base_type = BaseType.ADDRESS

    return TypeDescriptor(base_type=base_type, modifier=modifier, raw=raw)


def parse_declaration(element: ET.Element) -> tuple[TypeDescriptor, str]:
    """Parse a ``<param>`` or ``<proto>`` element into its type and name."""
    name, type_text, raw_text = split_declaration(element)
    return parse_type_text(type_text, raw_text), name
