"""npm-style version range handling.

Two jobs live here:

- Classifying the operator prefix of a declared range (``^``, ``~``,
  ``>=``, ``=`` or a bare pin) so that a rewrite can keep the operator and
  swap only the version.
- Deciding whether a version satisfies a range, following npm semantics:
  ``||`` unions, hyphen ranges, x-ranges, caret and tilde ranges, and the
  prerelease rule.

Ranges are desugared into sets of primitive comparators built from
semver.Version, e.g. ``^1.2`` → ``>=1.2.0 <2.0.0-0``.
"""

from __future__ import annotations

import re
from enum import Enum

import semver

from .errors import MalformedRangeError
from .models import MalformedRange
from .versions import PartialVersion, parse_partial, parse_version

Comparator = tuple[str, semver.Version]

_HYPHEN_RE = re.compile(r"^(\S+)\s+-\s+(\S+)$")
# npm allows whitespace between an operator and its version (">= 1.2.3")
_OPERATOR_SPACE_RE = re.compile(r"(<=|>=|<|>|=|\^|~>?)\s+")
_TOKEN_RE = re.compile(r"^(<=|>=|<|>|=|\^|~>|~)?(.*)$")


class RangeType(str, Enum):
    """Operator prefixes a rewrite can preserve."""

    CARET = "^"
    TILDE = "~"
    GTE = ">="
    EQ = "="
    EXACT = ""


# Checked in order; every prefix here is unambiguous against the others.
_PREFIXES = (RangeType.GTE, RangeType.CARET, RangeType.TILDE, RangeType.EQ)


def _malformed(range_str: str, package: str, dependency: str) -> MalformedRangeError:
    return MalformedRangeError(
        [MalformedRange(package=package, dependency=dependency, range=range_str)]
    )


def range_type(
    range_str: str, *, package: str = "<unknown>", dependency: str = "<unknown>"
) -> RangeType:
    """Classify the operator prefix of a declared range.

    Examples:
        "^1.2.3" → RangeType.CARET
        "~1.2"   → RangeType.TILDE
        "1.2.3"  → RangeType.EXACT

    Only single-comparator ranges whose version part is a real version are
    accepted: a bare or "=" pin must be complete, "^", "~" and ">=" may be
    partial ("^1.2", "~1.x").

    Raises:
        MalformedRangeError: For anything else ("*", "1.x", ">=1 <2",
            "a || b", "<2.0.0", dist-tags, URLs), naming package and
            dependency. There is no default.
    """
    text = _OPERATOR_SPACE_RE.sub(r"\1", range_str.strip())
    prefix = RangeType.EXACT
    rest = text
    for candidate in _PREFIXES:
        if text.startswith(candidate.value):
            prefix = candidate
            rest = text[len(candidate.value) :]
            break

    partial = parse_partial(rest)
    if partial is None or partial.major is None:
        raise _malformed(range_str, package, dependency)
    if prefix in (RangeType.EXACT, RangeType.EQ) and not partial.is_complete:
        raise _malformed(range_str, package, dependency)
    return prefix


def rewrite_range(
    range_str: str,
    version: str,
    *,
    package: str = "<unknown>",
    dependency: str = "<unknown>",
) -> str:
    """Keep the operator of range_str and substitute version.

    Examples:
        rewrite_range("^1.2.3", "2.0.0") → "^2.0.0"
        rewrite_range("1.2.3", "2.0.0")  → "2.0.0"
    """
    prefix = range_type(range_str, package=package, dependency=dependency)
    return f"{prefix.value}{version}"


def _pre0(major: int, minor: int, patch: int) -> semver.Version:
    """The lowest possible version of major.minor.patch (its "-0" prerelease)."""
    return semver.Version(major, minor, patch, "0")


def _next_after(p: PartialVersion) -> tuple[int, int, int]:
    """First release outside the partial version "1" → 2.0.0, "1.2" → 1.3.0."""
    assert p.major is not None
    if p.minor is None:
        return (p.major + 1, 0, 0)
    return (p.major, p.minor + 1, 0)


def _caret(p: PartialVersion) -> list[Comparator]:
    major, minor, patch = p.major, p.minor, p.patch
    assert major is not None
    if minor is None or major:
        upper = (major + 1, 0, 0)
    elif patch is None or minor:
        upper = (0, minor + 1, 0)
    else:
        upper = (0, 0, patch + 1)
    return [(">=", p.floor()), ("<", _pre0(*upper))]


def _tilde(p: PartialVersion) -> list[Comparator]:
    return [(">=", p.floor()), ("<", _pre0(*_next_after(p)))]


def _desugar(op: str, p: PartialVersion) -> list[Comparator]:
    """Turn one range token into primitive comparators."""
    if p.major is None:
        # "*", "x", ">=*" match everything; "<*" and ">*" match nothing
        if op in ("<", ">"):
            return [("<", _pre0(0, 0, 0))]
        return []
    if op in ("", "="):
        if p.is_complete:
            return [("=", p.floor())]
        return [(">=", p.floor()), ("<", _pre0(*_next_after(p)))]
    if op == "^":
        return _caret(p)
    if op in ("~", "~>"):
        return _tilde(p)
    if p.is_complete or op == ">=":
        return [(op, p.floor())]
    if op == "<":
        return [("<", _pre0(p.major, p.minor or 0, 0))]
    if op == ">":
        return [(">=", semver.Version(*_next_after(p)))]
    # "<=" with a partial version
    return [("<", _pre0(*_next_after(p)))]


def _parse_partial_or_raise(text: str) -> PartialVersion:
    partial = parse_partial(text)
    if partial is None:
        raise ValueError(text)
    return partial


def _parse_set(text: str) -> list[Comparator]:
    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        low = _parse_partial_or_raise(hyphen.group(1))
        high = _parse_partial_or_raise(hyphen.group(2))
        comparators: list[Comparator] = []
        if low.major is not None:
            comparators.append((">=", low.floor()))
        if high.major is not None:
            if high.is_complete:
                comparators.append(("<=", high.floor()))
            else:
                comparators.append(("<", _pre0(*_next_after(high))))
        return comparators

    comparators = []
    for token in _OPERATOR_SPACE_RE.sub(r"\1", text).split():
        match = _TOKEN_RE.match(token)
        assert match is not None
        comparators.extend(
            _desugar(match.group(1) or "", _parse_partial_or_raise(match.group(2)))
        )
    return comparators


def parse_range(
    range_str: str, *, package: str = "<unknown>", dependency: str = "<unknown>"
) -> list[list[Comparator]]:
    """Parse a range into alternative comparator sets (one per "||" branch).

    An empty comparator set matches every non-prerelease version.

    Raises:
        MalformedRangeError: If any part of the range is not understood.
    """
    try:
        return [_parse_set(part.strip()) for part in range_str.split("||")]
    except ValueError:
        raise _malformed(range_str, package, dependency) from None


def _compare(version: semver.Version, op: str, bound: semver.Version) -> bool:
    if op == "<":
        return version < bound
    if op == "<=":
        return version <= bound
    if op == ">":
        return version > bound
    if op == ">=":
        return version >= bound
    return version == bound


def _test_set(version: semver.Version, comparators: list[Comparator]) -> bool:
    if not all(_compare(version, op, bound) for op, bound in comparators):
        return False
    if not version.prerelease:
        return True
    # A prerelease only matches when the range opts in to prereleases of
    # that exact major.minor.patch
    return any(
        bound.prerelease
        and (bound.major, bound.minor, bound.patch)
        == (version.major, version.minor, version.patch)
        for _, bound in comparators
    )


def satisfies(
    version: str,
    range_str: str,
    *,
    package: str = "<unknown>",
    dependency: str = "<unknown>",
) -> bool:
    """Return True if version is matched by the npm range range_str.

    Examples:
        satisfies("1.5.0", "^1.2.3") → True
        satisfies("2.0.0", "^1.2.3") → False
        satisfies("2.0.0", "1.x || 2.x") → True

    Raises:
        MalformedRangeError: If range_str cannot be parsed.
        ValueError: If version is not a complete semver version.
    """
    parsed_version = parse_version(version)
    comparator_sets = parse_range(range_str, package=package, dependency=dependency)
    return any(_test_set(parsed_version, s) for s in comparator_sets)
