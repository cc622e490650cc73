"""UrlTemplate — the default matcher for string route paths.

Template syntax::

    "/users"            static text
    "/users/:id"        string placeholder (colon style)
    "/users/{id}"       string placeholder (brace style)
    "/users/{id:int}"   typed placeholder, converted on match
    "/files/{rest:path}"  consumes slashes up to a query or fragment

Templates match a *prefix* of the path. The match must stop on a segment
boundary (end of input, ``/``, ``?`` or ``#``) so ``/users`` does not match
``/usersettings``. Whatever follows the match becomes the tail handed to
child routes.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from trellis.errors import ConfigurationError, MissingParameterError
from trellis.routing.matcher import UrlMatch
from trellis.routing.params import CONVERTERS, convert_param, format_param

_PLACEHOLDER = re.compile(
    r":(?P<colon>[A-Za-z_]\w*)|\{(?P<brace>[A-Za-z_]\w*)(?::(?P<type>\w+))?\}"
)


@dataclass(frozen=True, slots=True)
class TemplateSegment:
    """A parsed piece of a template.

    Static:  ``/users/``  (is_param=False)
    Param:   ``:id``      (is_param=True, param_name="id")
    Typed:   ``{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


def parse_template(template: str) -> list[TemplateSegment]:
    """Parse a template string into static and placeholder segments.

    Examples::

        "/users"          -> [TemplateSegment("/users")]
        "/users/:id"      -> [TemplateSegment("/users/"), TemplateSegment(":id", is_param=True, ...)]
        "/users/{id:int}" -> [TemplateSegment("/users/"), TemplateSegment("{id:int}", ..., param_type="int")]

    Raises ``ConfigurationError`` for unknown converter types and repeated
    parameter names.
    """
    segments: list[TemplateSegment] = []
    seen: set[str] = set()
    pos = 0
    for m in _PLACEHOLDER.finditer(template):
        if m.start() > pos:
            segments.append(TemplateSegment(template[pos : m.start()]))
        name = m.group("colon") or m.group("brace")
        param_type = m.group("type") or "str"
        if param_type not in CONVERTERS:
            msg = (
                f"Unknown parameter type {param_type!r} in template {template!r}. "
                f"Expected one of: {', '.join(sorted(CONVERTERS))}"
            )
            raise ConfigurationError(msg)
        if name in seen:
            msg = f"Parameter {name!r} appears more than once in template {template!r}"
            raise ConfigurationError(msg)
        seen.add(name)
        segments.append(
            TemplateSegment(m.group(0), is_param=True, param_name=name, param_type=param_type)
        )
        pos = m.end()
    if pos < len(template):
        segments.append(TemplateSegment(template[pos:]))
    return segments


def _compile(template: str, segments: list[TemplateSegment]) -> re.Pattern[str]:
    parts: list[str] = ["^"]
    for seg in segments:
        if seg.is_param:
            pattern, _ = CONVERTERS[seg.param_type]
            parts.append(f"(?P<{seg.param_name}>{pattern})")
        else:
            parts.append(re.escape(seg.value))
    # A trailing slash already ends on a boundary
    if not template.endswith("/"):
        parts.append(r"(?=[/?#]|$)")
    return re.compile("".join(parts))


class UrlTemplate:
    """Prefix-matching URL template.

    Usage::

        t = UrlTemplate("/users/{id:int}")
        m = t.match("/users/42/profile")
        # UrlMatch(matched="/users/42", tail="/profile", parameters={"id": 42})
        t.render({"id": 42}, "/profile")
        # "/users/42/profile"
    """

    __slots__ = ("_regex", "_segments", "template")

    def __init__(self, template: str) -> None:
        self.template = template
        self._segments = parse_template(template)
        self._regex = _compile(template, self._segments)

    @property
    def parameter_names(self) -> tuple[str, ...]:
        """Placeholder names in template order."""
        return tuple(s.param_name for s in self._segments if s.param_name)

    def match(self, path: str) -> UrlMatch | None:
        m = self._regex.match(path)
        if m is None:
            return None
        parameters: dict[str, Any] = {}
        for seg in self._segments:
            if seg.param_name is None:
                continue
            try:
                parameters[seg.param_name] = convert_param(
                    m.group(seg.param_name), seg.param_type
                )
            except ValueError:
                return None
        return UrlMatch(matched=m.group(0), tail=path[m.end() :], parameters=parameters)

    def render(self, parameters: Mapping[str, Any], tail: str = "") -> str:
        parts: list[str] = []
        for seg in self._segments:
            if seg.param_name is None:
                parts.append(seg.value)
                continue
            if seg.param_name not in parameters:
                raise MissingParameterError(seg.param_name, self.template)
            parts.append(format_param(parameters[seg.param_name]))
        parts.append(tail)
        return "".join(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UrlTemplate):
            return NotImplemented
        return self.template == other.template

    def __hash__(self) -> int:
        return hash(self.template)

    def __repr__(self) -> str:
        return f"UrlTemplate({self.template!r})"
