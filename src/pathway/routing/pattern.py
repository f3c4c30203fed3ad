"""Path pattern compiler.

Turns a path template into a ``PathPattern``: an executable matcher plus
the ordered list of parameter names it captures.

Syntax::

    /literal        exact segment
    *               wildcard, any substring (including empty)
    (text)          literal group, required as written (parentheses included)
    (text)?         optional literal group
    :name           named parameter, captures ``[^/]+``
    :name(regex)    named parameter with a custom sub-pattern

Patterns without parameters, wildcards, or optional groups compile to
plain string comparisons. ``/*`` compiles to a matcher that accepts
every path.
"""

import re
from dataclasses import dataclass
from typing import Protocol

from pathway.errors import InvalidPatternError

MATCH_ALL_PATTERN = "/*"

_DEFAULT_PARAM_PATTERN = r"[^/]+"


class Matcher(Protocol):
    """Compiled, executable form of a pattern."""

    def match(self, path: str) -> bool: ...

    def prefix_length(self, path: str) -> int: ...


@dataclass(frozen=True, slots=True)
class MatchAll:
    """Accepts every path. Used for ``/*``."""

    def match(self, path: str) -> bool:
        return True

    def prefix_length(self, path: str) -> int:
        return 0


@dataclass(frozen=True, slots=True)
class ExactMatcher:
    """String equality, optionally ignoring one trailing slash.

    When ``strict`` is false, ``path`` is stored without its trailing slash.
    """

    path: str
    strict: bool = False

    def match(self, path: str) -> bool:
        if not self.strict:
            path = _trim_slash(path)
        return path == self.path

    def prefix_length(self, path: str) -> int:
        return len(path) if self.match(path) else 0


@dataclass(frozen=True, slots=True)
class PrefixMatcher:
    """Matches any path starting with ``prefix``."""

    prefix: str

    def match(self, path: str) -> bool:
        return path.startswith(self.prefix)

    def prefix_length(self, path: str) -> int:
        return len(self.prefix) if self.match(path) else 0


@dataclass(frozen=True, slots=True)
class RegexMatcher:
    """General pattern backed by a compiled regular expression.

    Parameter captures are named ``_p0``, ``_p1``, ... in textual order.

    When ``strict`` is false, a path that fails to match is retried with one
    trailing slash added, or removed if it already ends in one.
    """

    regex: re.Pattern[str]
    strict: bool = True

    def find(self, path: str) -> re.Match[str] | None:
        """Return the regex match for *path*, honoring slash tolerance."""
        m = self.regex.match(path)
        if m is not None or self.strict:
            return m
        if path.endswith("/"):
            return self.regex.match(path[:-1])
        return self.regex.match(path + "/")

    def match(self, path: str) -> bool:
        return self.find(path) is not None

    def prefix_length(self, path: str) -> int:
        m = self.find(path)
        return m.end() if m else 0


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled path pattern. Immutable after construction."""

    source: str
    matcher: Matcher
    param_names: tuple[str, ...] = ()

    @property
    def is_simple(self) -> bool:
        """True when matching is a string comparison rather than a regex."""
        return not isinstance(self.matcher, RegexMatcher)

    def match(self, path: str) -> bool:
        return self.matcher.match(path)

    def prefix_length(self, path: str) -> int:
        """Number of leading characters of *path* consumed by this pattern."""
        return self.matcher.prefix_length(path)

    def extract_params(self, path: str) -> dict[str, str]:
        """Map captured values to parameter names.

        A parameter inside an optional part that did not participate in the
        match extracts as ``""``. For duplicate names the last participating
        capture wins.
        """
        if not self.param_names or not isinstance(self.matcher, RegexMatcher):
            return {}
        m = self.matcher.find(path)
        if m is None:
            return {}
        params: dict[str, str] = {}
        for index, name in enumerate(self.param_names):
            value = m.group(f"_p{index}")
            if value is None:
                params.setdefault(name, "")
            else:
                params[name] = value
        return params


def compile_pattern(
    pattern: str,
    *,
    strict_slash: bool = False,
    prefix_only: bool = False,
) -> PathPattern:
    """Compile *pattern* into a ``PathPattern``.

    ``strict_slash`` makes ``/abc`` and ``/abc/`` different paths.
    ``prefix_only`` anchors the match at the start only (used for mounting).

    Raises ``InvalidPatternError`` for malformed patterns.
    """
    return _PatternParser(pattern).parse(strict_slash=strict_slash, prefix_only=prefix_only)


class _PatternParser:
    """Single left-to-right pass over a pattern's characters."""

    __slots__ = ("_literal", "_names", "_pattern", "_pos", "_regex", "_run", "_simple")

    def __init__(self, pattern: str) -> None:
        self._pattern = pattern
        self._pos = 0
        self._regex: list[str] = []
        self._run: list[str] = []  # pending literal text, escaped on flush
        self._literal: list[str] = []  # unescaped text for the simple fast path
        self._names: list[str] = []
        self._simple = True

    def parse(self, *, strict_slash: bool, prefix_only: bool) -> PathPattern:
        pattern = self._pattern
        if not pattern:
            raise InvalidPatternError(pattern, 0, "pattern must not be empty")
        if pattern[0] != "/":
            raise InvalidPatternError(pattern, 0, "pattern must start with '/'")
        if pattern == MATCH_ALL_PATTERN:
            return PathPattern(source=pattern, matcher=MatchAll())

        while self._pos < len(pattern):
            ch = pattern[self._pos]
            if ch == "*":
                self._flush()
                self._simple = False
                self._regex.append(".*")
                self._pos += 1
            elif ch == "(":
                self._group()
            elif ch == ")":
                raise InvalidPatternError(pattern, self._pos, "unmatched ')'")
            elif ch == "?":
                # Applies to the preceding token.
                self._flush()
                self._simple = False
                self._regex.append("?")
                self._pos += 1
            elif ch == ":":
                self._param()
            else:
                self._append_literal(ch)
                self._pos += 1
        self._flush()

        if self._simple:
            literal = "".join(self._literal)
            if prefix_only:
                matcher: Matcher = PrefixMatcher(literal)
            elif strict_slash:
                matcher = ExactMatcher(literal, strict=True)
            else:
                matcher = ExactMatcher(_trim_slash(literal), strict=False)
            return PathPattern(source=pattern, matcher=matcher)

        body = "".join(self._regex)
        if not strict_slash and not prefix_only and not pattern.endswith("*"):
            body += "?" if body.endswith("/") else "/?"
        if not prefix_only:
            body += r"\Z"

        try:
            regex = re.compile("^" + body)
        except re.error as exc:
            raise InvalidPatternError(pattern, exc.pos or 0, str(exc)) from exc

        return PathPattern(
            source=pattern,
            matcher=RegexMatcher(regex, strict=strict_slash or prefix_only),
            param_names=tuple(self._names),
        )

    def _append_literal(self, text: str) -> None:
        self._run.append(text)
        self._literal.append(text)

    def _flush(self) -> None:
        if self._run:
            self._regex.append(re.escape("".join(self._run)))
            self._run.clear()

    def _group(self) -> None:
        pattern = self._pattern
        start = self._pos
        depth = 1
        pos = start + 1
        content: list[str] = []
        while pos < len(pattern):
            ch = pattern[pos]
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    break
            content.append(ch)
            pos += 1
        else:
            raise InvalidPatternError(pattern, start, "unmatched '('")

        pos += 1  # past the closing ')'
        text = "".join(content)
        if pos < len(pattern) and pattern[pos] == "?":
            self._flush()
            self._simple = False
            self._regex.append(f"(?:{re.escape(text)})?")
            pos += 1
        else:
            self._append_literal(f"({text})")
        self._pos = pos

    def _param(self) -> None:
        pattern = self._pattern
        start = self._pos
        pos = start + 1
        while pos < len(pattern) and _is_name_char(pattern[pos]):
            pos += 1
        name = pattern[start + 1 : pos]
        if not name:
            raise InvalidPatternError(pattern, start, "missing parameter name")

        sub_pattern = _DEFAULT_PARAM_PATTERN
        if pos < len(pattern):
            ch = pattern[pos]
            if ch == "(":
                sub_pattern, pos = self._param_pattern(pos)
            elif ch not in "/:":
                raise InvalidPatternError(
                    pattern, pos, f"invalid character {ch!r} in parameter {name!r}"
                )

        self._flush()
        self._simple = False
        self._regex.append(f"(?P<_p{len(self._names)}>{sub_pattern})")
        self._names.append(name)
        self._pos = pos

    def _param_pattern(self, start: int) -> tuple[str, int]:
        """Read a balanced ``(...)`` sub-pattern. Returns it and the next index."""
        pattern = self._pattern
        depth = 1
        pos = start + 1
        chars: list[str] = []
        while pos < len(pattern):
            ch = pattern[pos]
            if ch == "\\" and pos + 1 < len(pattern):
                chars.append(pattern[pos : pos + 2])
                pos += 2
                continue
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    pos += 1
                    break
            chars.append(ch)
            pos += 1
        else:
            raise InvalidPatternError(pattern, start, "unmatched '(' in parameter pattern")

        sub_pattern = "".join(chars)
        if not sub_pattern:
            return _DEFAULT_PARAM_PATTERN, pos
        try:
            re.compile(sub_pattern)
        except re.error as exc:
            raise InvalidPatternError(
                pattern, start, f"invalid parameter pattern {sub_pattern!r}: {exc}"
            ) from exc
        return sub_pattern, pos


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_-"


def _trim_slash(path: str) -> str:
    if len(path) > 1 and path.endswith("/"):
        return path[:-1]
    return path
