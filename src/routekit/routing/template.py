"""URI templates — parse once, expand against objects, match candidate paths.

Brace expressions follow RFC 6570 (levels 1–4)::

    "/articles/{id}"                   simple expansion
    "/map/{x,y}"                       variable list, comma separated
    "/files/{+path}"                   reserved expansion, may contain "/"
    "/docs{#section}"                  fragment, prefixed with "#"
    "/articles{.format}"               label, prefixed with "."
    "/files{/dir,name}"                path segments, each prefixed with "/"
    "/matrix{;x,y}"                    path parameters, ";x=1;y=2"
    "/articles{?page,per_page}"        query, "?page=2&per_page=10"
    "/articles?sort=new{&page}"        query continuation, "&page=2"
    "/users/{name:3}"                  prefix, first three characters
    "/tags{/tags*}"                    explode, one segment per list item

Variable names may be dotted key paths (``{article.id}``) resolved against
attributes or mapping keys of the bindings.

Colon variables (``/articles/:articleID/comments``) expand like ``{name}``
but take a plain identifier only: the name stops at the first character
that is not a letter, digit or underscore, so ``:articleID.json`` is the
variable ``articleID`` followed by the literal ``.json``. Use the brace
form for key paths.

Undefined and ``None`` values, and empty lists and mappings, expand to
nothing.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote

from routekit.errors import TemplateSyntaxError

_RESERVED = ":/?#[]@!$&'()*+,;="

_VAR_CHAR = r"(?:[A-Za-z0-9_]|%[0-9A-Fa-f]{2})"
_VARSPEC = re.compile(
    rf"(?P<name>{_VAR_CHAR}+(?:\.{_VAR_CHAR}+)*)"
    r"(?::(?P<prefix>[1-9][0-9]{0,3})|(?P<explode>\*))?"
)
_COLON_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Reserved by RFC 6570 for future extensions.
_RESERVED_OPERATORS = frozenset("=,!@|")


@dataclass(frozen=True, slots=True)
class Operator:
    """Expansion rules for one expression operator (RFC 6570 appendix A)."""

    first: str
    sep: str
    named: bool
    ifemp: str
    allow_reserved: bool
    # Regex class of characters a matched expression body may contain
    body: str


OPERATORS: dict[str, Operator] = {
    "": Operator("", ",", False, "", False, r"[^/?#]"),
    "+": Operator("", ",", False, "", True, r"[^?#]"),
    "#": Operator("#", ",", False, "", True, r"."),
    ".": Operator(".", ".", False, "", False, r"[^/?#]"),
    "/": Operator("/", "/", False, "", False, r"[^?#]"),
    ";": Operator(";", ";", True, "", False, r"[^/?#]"),
    "?": Operator("?", "&", True, "=", False, r"[^#]"),
    "&": Operator("&", "&", True, "=", False, r"[^#]"),
}
# Colon variables behave like simple expansion
OPERATORS[":"] = OPERATORS[""]


@dataclass(frozen=True, slots=True)
class VarSpec:
    """One variable of an expression: ``name``, ``name:3`` or ``name*``."""

    name: str
    prefix: int | None = None
    explode: bool = False


@dataclass(frozen=True, slots=True)
class TemplatePart:
    """A parsed piece of a URI template.

    Literal:  ``/articles``      (is_variable=False)
    Simple:   ``{id}``           (is_variable=True, operator="")
    Query:    ``{?page,limit}``  (operator="?", two varspecs)
    Colon:    ``:articleID``     (operator=":")
    """

    value: str
    is_variable: bool = False
    operator: str = ""
    varspecs: tuple[VarSpec, ...] = ()

    @property
    def var_name(self) -> str | None:
        """Name of the first variable, or ``None`` for literal text."""
        if not self.varspecs:
            return None
        return self.varspecs[0].name


def parse_template(template: str) -> tuple[TemplatePart, ...]:
    """Split a template string into literal and variable parts.

    Raises ``TemplateSyntaxError`` on unbalanced or nested braces, empty
    expressions, reserved operators and invalid variable specs.
    """
    if not isinstance(template, str):
        raise TemplateSyntaxError(repr(template), 0, "Template must be a string")

    parts: list[TemplatePart] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            parts.append(TemplatePart(value="".join(literal)))
            literal.clear()

    i = 0
    while i < len(template):
        ch = template[i]
        if ch == "{":
            end = template.find("}", i + 1)
            if end == -1:
                raise TemplateSyntaxError(template, i, "Unclosed '{'")
            nested = template.find("{", i + 1, end)
            if nested != -1:
                raise TemplateSyntaxError(template, nested, "Nested '{'")
            flush()
            parts.append(_parse_expression(template, i, end))
            i = end + 1
        elif ch == "}":
            raise TemplateSyntaxError(template, i, "Unmatched '}'")
        elif ch == ":" and (m := _COLON_NAME.match(template, i + 1)):
            flush()
            parts.append(
                TemplatePart(
                    value=f":{m.group(0)}",
                    is_variable=True,
                    operator=":",
                    varspecs=(VarSpec(m.group(0)),),
                )
            )
            i = m.end()
        else:
            literal.append(ch)
            i += 1

    flush()
    return tuple(parts)


def _parse_expression(template: str, start: int, end: int) -> TemplatePart:
    expression = template[start + 1 : end]
    if not expression:
        raise TemplateSyntaxError(template, start, "Empty expression '{}'")

    operator = ""
    if expression[0] in OPERATORS and expression[0] != ":":
        operator = expression[0]
    elif expression[0] in _RESERVED_OPERATORS:
        raise TemplateSyntaxError(
            template, start + 1, f"Unsupported operator {expression[0]!r}"
        )

    body = expression[len(operator) :]
    if not body:
        raise TemplateSyntaxError(template, start + 1, "Missing variable name")

    varspecs: list[VarSpec] = []
    offset = start + 1 + len(operator)
    for text in body.split(","):
        m = _VARSPEC.fullmatch(text)
        if m is None:
            raise TemplateSyntaxError(template, offset, f"Invalid variable name {text!r}")
        prefix = m.group("prefix")
        varspecs.append(
            VarSpec(
                name=m.group("name"),
                prefix=int(prefix) if prefix else None,
                explode=m.group("explode") is not None,
            )
        )
        offset += len(text) + 1

    return TemplatePart(
        value=template[start : end + 1],
        is_variable=True,
        operator=operator,
        varspecs=tuple(varspecs),
    )


def resolve(bindings: Any, key_path: str) -> Any:
    """Look up a dotted key path on a mapping or object.

    Mappings are tried with the whole key path first, so ``{"a.b": 1}``
    resolves ``a.b`` directly. Missing keys and attributes yield ``None``.
    """
    if bindings is None:
        return None
    if isinstance(bindings, Mapping) and key_path in bindings:
        return bindings[key_path]

    value = bindings
    for key in key_path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(key)
        else:
            value = getattr(value, key, None)
    return value


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _expand_part(part: TemplatePart, bindings: Any, escape: bool) -> str:
    op = OPERATORS[part.operator]
    safe = _RESERVED if op.allow_reserved else ""

    def enc(value: Any) -> str:
        text = _stringify(value)
        return quote(text, safe=safe) if escape else text

    def named(name: str, text: str) -> str:
        return f"{name}{op.ifemp}" if text == "" else f"{name}={text}"

    pieces: list[str] = []
    for spec in part.varspecs:
        value = resolve(bindings, spec.name)
        if value is None:
            continue

        if isinstance(value, Mapping):
            items = [(k, v) for k, v in value.items() if v is not None]
            if not items:
                continue
            if spec.explode:
                pieces.extend(f"{enc(k)}={enc(v)}" for k, v in items)
            else:
                joined = ",".join(f"{enc(k)},{enc(v)}" for k, v in items)
                pieces.append(named(spec.name, joined) if op.named else joined)
        elif isinstance(value, (list, tuple)):
            values = [v for v in value if v is not None]
            if not values:
                continue
            if spec.explode:
                if op.named:
                    pieces.extend(named(spec.name, enc(v)) for v in values)
                else:
                    pieces.extend(enc(v) for v in values)
            else:
                joined = ",".join(enc(v) for v in values)
                pieces.append(named(spec.name, joined) if op.named else joined)
        else:
            text = _stringify(value)
            if spec.prefix is not None:
                text = text[: spec.prefix]
            text = quote(text, safe=safe) if escape else text
            pieces.append(named(spec.name, text) if op.named else text)

    if not pieces:
        return ""
    return op.first + op.sep.join(pieces)


def _assign(bindings: dict[str, Any], name: str, value: Any) -> bool:
    if name in bindings and bindings[name] != value:
        return False
    bindings[name] = value
    return True


def _bind_positional(
    part: TemplatePart, op: Operator, body: str, bindings: dict[str, Any]
) -> bool:
    specs = part.varspecs
    if len(specs) == 1:
        spec = specs[0]
        if spec.explode:
            return _assign(bindings, spec.name, [unquote(p) for p in body.split(op.sep)])
        return _assign(bindings, spec.name, unquote(body))

    pieces = body.split(op.sep, len(specs) - 1)
    return all(
        _assign(bindings, spec.name, unquote(piece))
        for spec, piece in zip(specs, pieces, strict=False)
    )


def _bind_named(
    part: TemplatePart, op: Operator, body: str, bindings: dict[str, Any]
) -> bool:
    pairs: dict[str, list[str]] = {}
    for item in body.split(op.sep):
        if not item:
            continue
        key, _, value = item.partition("=")
        pairs.setdefault(unquote(key), []).append(unquote(value))

    declared = {spec.name for spec in part.varspecs}
    extra = {k: v[0] if len(v) == 1 else v for k, v in pairs.items() if k not in declared}
    exploded = [spec for spec in part.varspecs if spec.explode]
    if extra and not exploded:
        return False

    for spec in part.varspecs:
        if spec.name in pairs:
            values = pairs[spec.name]
            value: Any = values if spec.explode else values[0]
            if not _assign(bindings, spec.name, value):
                return False
    if extra:
        return _assign(bindings, exploded[0].name, extra)
    return True


class URITemplate:
    """A parsed, immutable URI template.

    Usage::

        template = URITemplate.parse("/articles/:articleID/comments")
        template.expand({"articleID": 42})          # "/articles/42/comments"
        template.match("/articles/42/comments")     # {"articleID": "42"}
        template.match("/airlines")                 # None
    """

    __slots__ = (
        "_keeps_fragment",
        "_keeps_query",
        "_parts",
        "_pattern",
        "_source",
        "_variables",
    )

    _source: str
    _parts: tuple[TemplatePart, ...]
    _variables: tuple[str, ...]
    _pattern: re.Pattern[str]
    _keeps_query: bool
    _keeps_fragment: bool

    def __init__(self, source: str) -> None:
        parts = parse_template(source)
        names: list[str] = []
        for part in parts:
            for spec in part.varspecs:
                if spec.name not in names:
                    names.append(spec.name)

        keeps_query = any(
            p.operator in ("?", "&") or (not p.is_variable and "?" in p.value) for p in parts
        )
        keeps_fragment = any(
            p.operator == "#" or (not p.is_variable and "#" in p.value) for p in parts
        )

        object.__setattr__(self, "_source", source)
        object.__setattr__(self, "_parts", parts)
        object.__setattr__(self, "_variables", tuple(names))
        object.__setattr__(self, "_pattern", _compile(parts))
        object.__setattr__(self, "_keeps_query", keeps_query)
        object.__setattr__(self, "_keeps_fragment", keeps_fragment)

    @classmethod
    def parse(cls, source: "str | URITemplate") -> "URITemplate":
        """Parse *source*, or return it unchanged if it is already parsed."""
        if isinstance(source, URITemplate):
            return source
        return cls(source)

    def __setattr__(self, name: str, value: object) -> None:
        msg = f"{type(self).__name__} is immutable"
        raise AttributeError(msg)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, URITemplate):
            return NotImplemented
        return self._source == other._source

    def __hash__(self) -> int:
        return hash(self._source)

    def __str__(self) -> str:
        return self._source

    def __repr__(self) -> str:
        return f"URITemplate({self._source!r})"

    @property
    def source(self) -> str:
        return self._source

    @property
    def parts(self) -> tuple[TemplatePart, ...]:
        return self._parts

    @property
    def variables(self) -> tuple[str, ...]:
        """Variable names in order of first appearance."""
        return self._variables

    def expand(self, bindings: Any = None, *, escape: bool = False) -> str:
        """Render the template against *bindings*.

        With ``escape=True`` each value is percent-encoded before it is
        substituted; operator prefixes, separators and the template's
        literal text are never touched.
        """
        out: list[str] = []
        for part in self._parts:
            if part.is_variable:
                out.append(_expand_part(part, bindings, escape))
            else:
                out.append(part.value)
        return "".join(out)

    def match(self, path: str) -> dict[str, Any] | None:
        """Match a candidate path, returning its variable bindings.

        Returns ``None`` when the path does not fit. The candidate's query
        string is ignored unless the template has a literal ``?`` or a
        ``{?...}``/``{&...}`` expression; its fragment is ignored unless the
        template has a literal ``#`` or a ``{#...}`` expression. Exploded
        variables bind lists; an exploded query variable collects the
        parameters no other variable names.
        """
        base, hash_mark, fragment = path.partition("#")
        if not self._keeps_query:
            base = base.partition("?")[0]
        candidate = base + hash_mark + fragment if self._keeps_fragment else base

        m = self._pattern.fullmatch(candidate)
        if m is None:
            return None

        bindings: dict[str, Any] = {}
        var_parts = [p for p in self._parts if p.is_variable]
        for index, part in enumerate(var_parts):
            body = m.group(f"e{index}")
            if body is None:
                continue
            op = OPERATORS[part.operator]
            bind = _bind_named if op.named else _bind_positional
            if not bind(part, op, body, bindings):
                return None
        return bindings


def _compile(parts: tuple[TemplatePart, ...]) -> re.Pattern[str]:
    pieces: list[str] = []
    index = 0
    for part in parts:
        if not part.is_variable:
            pieces.append(re.escape(part.value))
            continue
        op = OPERATORS[part.operator]
        group = f"e{index}"
        index += 1
        if op.first:
            pieces.append(f"(?:{re.escape(op.first)}(?P<{group}>{op.body}*?))?")
        else:
            pieces.append(f"(?P<{group}>{op.body}+?)")
    return re.compile("".join(pieces), re.DOTALL)
