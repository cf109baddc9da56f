"""npm-style semantic version ranges.

Ranges are desugared the way npm does it (``^1.2.3`` becomes
``>=1.2.3 <2.0.0-0``, ``~1.2`` becomes ``>=1.2.0 <1.3.0-0``, ...) and stored
as a union of intervals, which makes subset and overlap checks plain interval
arithmetic.

Supported syntax:
- comparators ``<``, ``<=``, ``>``, ``>=``, ``=``
- caret ``^1.2.3``, tilde ``~1.2.3`` / ``~>1.2.3``
- x-ranges ``*``, ``x``, ``1.x``, ``1.2``, empty string
- hyphen ranges ``1.2.3 - 2.3``
- ``||`` unions and whitespace-separated intersections
- ``npm:<name>@<range>`` alias specifiers
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Iterable

from npmcheck.exceptions import InvalidRangeError, InvalidVersionError

_IDENT = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"

_VERSION_RE = re.compile(
    r"^[v=]?\s*(\d+)\.(\d+)\.(\d+)"
    rf"(?:-({_IDENT}))?"
    rf"(?:\+{_IDENT})?$"
)

_PARTIAL_RE = re.compile(
    r"^[v=]?(?P<major>\*|[xX]|\d+)"
    r"(?:\.(?P<minor>\*|[xX]|\d+)"
    r"(?:\.(?P<patch>\*|[xX]|\d+)"
    rf"(?:-(?P<pre>{_IDENT}))?"
    rf"(?:\+{_IDENT})?"
    r")?)?$"
)

_COMPARATOR_RE = re.compile(r"^(?P<op><=|>=|<|>|=|~>|~|\^)?(?P<ver>.*)$")

_HYPHEN_RE = re.compile(r"^(?P<lo>\S+)\s+-\s+(?P<hi>\S+)$")

# ">= 1.2.3" -> ">=1.2.3"
_OP_SPACE_RE = re.compile(r"(<=|>=|<|>|=|~>|~|\^)\s+")

# npm:<name>@<range>, name may be scoped
_ALIAS_RE = re.compile(r"^npm:(?:@[^/@\s]+/)?[^@\s]+(?:@(?P<range>.*))?$")

_WILDCARDS = ("*", "x", "X")


@total_ordering
@dataclass(frozen=True)
class Version:
    """A semantic version; build metadata is dropped on parse."""

    major: int
    minor: int = 0
    patch: int = 0
    prerelease: tuple[str, ...] = ()

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            base += "-" + ".".join(self.prerelease)
        return base

    def as_tuple(self) -> tuple:
        """
        Convert to a tuple for comparison.

        Releases sort after any prerelease of the same major.minor.patch.
        Numeric identifiers sort before alphanumeric ones and compare as
        integers; a longer identifier list wins when all shared ones match.
        """
        if not self.prerelease:
            pre: tuple = (1,)
        else:
            pre = (0,) + tuple(
                (0, int(ident), "") if ident.isdigit() else (1, 0, ident)
                for ident in self.prerelease
            )
        return (self.major, self.minor, self.patch, pre)

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.as_tuple() < other.as_tuple()


def parse_version(text: str) -> Version:
    """Parse a full ``major.minor.patch[-pre][+build]`` version string.

    Raises:
        InvalidVersionError: If *text* is not a full semantic version.
    """
    match = _VERSION_RE.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise InvalidVersionError(f"Invalid version string: {text!r}")
    major, minor, patch, pre = match.groups()
    return Version(int(major), int(minor), int(patch), tuple(pre.split(".")) if pre else ())


def _floor(major: int, minor: int = 0, patch: int = 0) -> Version:
    """Smallest version with the given numbers (``X.Y.Z-0``)."""
    return Version(major, minor, patch, ("0",))


# ── intervals ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Interval:
    """A contiguous set of versions; a ``None`` bound is unbounded."""

    lower: Version | None = None
    lower_inclusive: bool = True
    upper: Version | None = None
    upper_inclusive: bool = False

    @property
    def is_empty(self) -> bool:
        if self.lower is None or self.upper is None:
            return False
        if self.lower == self.upper:
            return not (self.lower_inclusive and self.upper_inclusive)
        return self.lower > self.upper

    def contains(self, version: Version) -> bool:
        if self.lower is not None:
            if version < self.lower or (version == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if version > self.upper or (version == self.upper and not self.upper_inclusive):
                return False
        return True

    def intersection(self, other: "Interval") -> "Interval":
        lower, lower_inclusive = _tighter_lower(
            self.lower, self.lower_inclusive, other.lower, other.lower_inclusive
        )
        upper, upper_inclusive = _tighter_upper(
            self.upper, self.upper_inclusive, other.upper, other.upper_inclusive
        )
        return Interval(lower, lower_inclusive, upper, upper_inclusive)

    def covers(self, other: "Interval") -> bool:
        """True if every version in *other* is also in this interval."""
        return _lower_at_or_below(
            self.lower, self.lower_inclusive, other.lower, other.lower_inclusive
        ) and _upper_at_or_above(
            self.upper, self.upper_inclusive, other.upper, other.upper_inclusive
        )


_EMPTY = Interval(_floor(0), False, _floor(0), False)


def _tighter_lower(a, a_inc, b, b_inc):
    if a is None:
        return b, b_inc
    if b is None or a > b:
        return a, a_inc
    if b > a:
        return b, b_inc
    return a, a_inc and b_inc


def _tighter_upper(a, a_inc, b, b_inc):
    if a is None:
        return b, b_inc
    if b is None or a < b:
        return a, a_inc
    if b < a:
        return b, b_inc
    return a, a_inc and b_inc


def _looser_upper(a, a_inc, b, b_inc):
    if a is None or b is None:
        return None, False
    if a > b:
        return a, a_inc
    if b > a:
        return b, b_inc
    return a, a_inc or b_inc


def _lower_at_or_below(a, a_inc, b, b_inc) -> bool:
    if a is None:
        return True
    if b is None:
        return False
    if a != b:
        return a < b
    return a_inc or not b_inc


def _upper_at_or_above(a, a_inc, b, b_inc) -> bool:
    if a is None:
        return True
    if b is None:
        return False
    if a != b:
        return a > b
    return a_inc or not b_inc


def _lower_sort_key(interval: Interval) -> tuple:
    if interval.lower is None:
        return (0,)
    return (1, interval.lower.as_tuple(), 0 if interval.lower_inclusive else 1)


def _union(intervals: Iterable[Interval]) -> list[Interval]:
    """Merge overlapping or touching intervals into a sorted disjoint list."""
    live = sorted((i for i in intervals if not i.is_empty), key=_lower_sort_key)
    merged: list[Interval] = []
    for interval in live:
        if merged and _touches(merged[-1], interval):
            prev = merged[-1]
            upper, upper_inclusive = _looser_upper(
                prev.upper, prev.upper_inclusive, interval.upper, interval.upper_inclusive
            )
            merged[-1] = Interval(prev.lower, prev.lower_inclusive, upper, upper_inclusive)
        else:
            merged.append(interval)
    return merged


def _touches(left: Interval, right: Interval) -> bool:
    # *right* never starts before *left*
    if left.upper is None or right.lower is None:
        return True
    if right.lower != left.upper:
        if _prerelease_gap(left, right):
            return True
        return right.lower < left.upper
    return left.upper_inclusive or right.lower_inclusive


def _prerelease_gap(left: Interval, right: Interval) -> bool:
    """True if only prereleases of one version lie between the two intervals.

    ``<2.0.0-0`` followed by ``>=2.0.0`` leaves out ``2.0.0-alpha`` and the
    like, which a range without a prerelease comparator never admits anyway.
    """
    lower = right.lower
    return (
        right.lower_inclusive
        and not lower.prerelease
        and not left.upper_inclusive
        and left.upper == _floor(lower.major, lower.minor, lower.patch)
    )


# ── ranges ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Range:
    """A parsed range: the union of its comparator sets."""

    raw: str
    intervals: tuple[Interval, ...]

    @property
    def is_empty(self) -> bool:
        return all(i.is_empty for i in self.intervals)

    def contains(self, version: Version | str) -> bool:
        if isinstance(version, str):
            version = parse_version(version)
        return any(i.contains(version) for i in self.intervals)

    def is_subset_of(self, other: "Range") -> bool:
        """True if every version admitted here is admitted by *other*."""
        merged = _union(other.intervals)
        return all(
            any(outer.covers(inner) for outer in merged)
            for inner in self.intervals
            if not inner.is_empty
        )

    def intersects(self, other: "Range") -> bool:
        return any(
            not a.intersection(b).is_empty for a in self.intervals for b in other.intervals
        )


def parse_range(spec: str) -> Range:
    """Parse an npm range specifier.

    Raises:
        InvalidRangeError: If *spec* is not a semver range (git URLs,
            dist-tags such as ``latest`` and ``file:`` paths included).
    """
    if not isinstance(spec, str):
        raise InvalidRangeError(repr(spec))
    text = spec.strip()
    alias = _ALIAS_RE.match(text)
    if alias:
        text = (alias.group("range") or "").strip()
    intervals = tuple(_parse_comparator_set(part.strip(), spec) for part in text.split("||"))
    return Range(raw=spec, intervals=intervals)


def _parse_comparator_set(text: str, spec: str) -> Interval:
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        return _hyphen(hyphen.group("lo"), hyphen.group("hi"), spec)
    result = Interval()
    for token in _OP_SPACE_RE.sub(r"\1", text).split():
        result = result.intersection(_comparator(token, spec))
    return result


def _partial(text: str, spec: str):
    """Split a possibly partial version into (major, minor, patch, prerelease).

    Wildcard or missing parts come back as ``None``; everything after the
    first wildcard is treated as a wildcard too.
    """
    match = _PARTIAL_RE.match(text)
    if not match:
        raise InvalidRangeError(spec)
    numbers: list[int | None] = []
    for part in (match.group("major"), match.group("minor"), match.group("patch")):
        if part is None or part in _WILDCARDS or (numbers and numbers[-1] is None):
            numbers.append(None)
        else:
            numbers.append(int(part))
    pre = match.group("pre")
    if pre and None in numbers:
        raise InvalidRangeError(spec)
    return numbers[0], numbers[1], numbers[2], tuple(pre.split(".")) if pre else ()


def _comparator(token: str, spec: str) -> Interval:
    match = _COMPARATOR_RE.match(token)
    op = match.group("op") or "="
    major, minor, patch, pre = _partial(match.group("ver") or "*", spec)

    if major is None:
        return _EMPTY if op in ("<", ">") else Interval()
    if op == "=":
        if minor is None:
            return Interval(Version(major), True, _floor(major + 1))
        if patch is None:
            return Interval(Version(major, minor), True, _floor(major, minor + 1))
        exact = Version(major, minor, patch, pre)
        return Interval(exact, True, exact, True)
    if op in ("~", "~>"):
        if minor is None:
            return Interval(Version(major), True, _floor(major + 1))
        return Interval(Version(major, minor, patch or 0, pre), True, _floor(major, minor + 1))
    if op == "^":
        lower = Version(major, minor or 0, patch or 0, pre)
        if minor is None or major > 0:
            return Interval(lower, True, _floor(major + 1))
        if patch is None or minor > 0:
            return Interval(lower, True, _floor(0, minor + 1))
        return Interval(lower, True, _floor(0, 0, patch + 1))
    return _primitive(op, major, minor, patch, pre)


def _primitive(op: str, major: int, minor, patch, pre) -> Interval:
    if minor is not None and patch is not None:
        version = Version(major, minor, patch, pre)
        if op == ">":
            return Interval(version, False)
        if op == ">=":
            return Interval(version, True)
        if op == "<":
            # <2.0.0 leaves out 2.0.0-alpha too
            return Interval(upper=version if pre else _floor(major, minor, patch))
        return Interval(upper=version, upper_inclusive=True)

    if op == ">":
        if minor is None:
            return Interval(Version(major + 1), True)
        return Interval(Version(major, minor + 1), True)
    if op == ">=":
        return Interval(Version(major, minor or 0), True)
    if op == "<":
        return Interval(upper=_floor(major, minor or 0))
    if minor is None:
        return Interval(upper=_floor(major + 1))
    return Interval(upper=_floor(major, minor + 1))


def _hyphen(low: str, high: str, spec: str) -> Interval:
    major, minor, patch, pre = _partial(low, spec)
    lower = None if major is None else Version(major, minor or 0, patch or 0, pre)

    major, minor, patch, pre = _partial(high, spec)
    if major is None:
        return Interval(lower, True)
    if minor is None:
        return Interval(lower, True, _floor(major + 1))
    if patch is None:
        return Interval(lower, True, _floor(major, minor + 1))
    return Interval(lower, True, Version(major, minor, patch, pre), True)


# ── satisfaction ─────────────────────────────────────────────────────────


def satisfies(declared: str, requested: str) -> bool:
    """Whether a declared range stays within a requested range.

    The declared range must admit at least one version, and every version it
    admits must also be admitted by *requested*. A declared specifier that is
    not a semver range at all (git URL, dist-tag, local path) never satisfies.

    Raises:
        InvalidRangeError: If *requested* is not a valid range.
    """
    wanted = parse_range(requested)
    try:
        have = parse_range(declared)
    except InvalidRangeError:
        return False
    return not have.is_empty and have.is_subset_of(wanted)


def intersects(declared: str, requested: str) -> bool:
    """Whether a declared range and a requested range share any version.

    Raises:
        InvalidRangeError: If *requested* is not a valid range.
    """
    wanted = parse_range(requested)
    try:
        have = parse_range(declared)
    except InvalidRangeError:
        return False
    return have.intersects(wanted)
