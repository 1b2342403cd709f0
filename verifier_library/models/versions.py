"""Compiler version identifiers and version constraints.

CompilerVersion is totally ordered by release; the commit hash is part of a
version's identity but never of its ordering. VersionConstraint evaluates the
npm-style ranges contracts declare in their version pragmas.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_VERSION_RE = re.compile(
    r"^v?(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?P<pre>[-.]?[A-Za-z][0-9A-Za-z.\-]*|[-.][0-9A-Za-z.\-]+)?"
    r"(?:\+commit\.(?P<commit>[0-9a-fA-F]+))?$"
)

_COMPARATOR_RE = re.compile(
    r"(?P<op>\^|~|>=|<=|>|<|==|=|!=)?\s*"
    r"(?P<version>v?\d+(?:\.\d+){0,2}(?:[-.]?[A-Za-z][0-9A-Za-z.\-]*)?(?:\+commit\.[0-9a-fA-F]+)?)"
)


def _prerelease_key(pre: str) -> tuple[tuple[int, int, str], ...]:
    pieces = re.findall(r"\d+|[A-Za-z]+", pre)
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in pieces)


@dataclass(frozen=True)
class CompilerVersion:
    """A compiler build identifier.

    Examples of accepted strings: "0.3.7", "v0.3.7+commit.6020b8bb",
    "0.4.0rc6", "0.8.21-nightly.2023.5.1+commit.d9974bed".
    """

    major: int
    minor: int
    patch: int
    pre: str | None = None
    commit: str | None = None

    @classmethod
    def parse(cls, value: str) -> CompilerVersion:
        """Parse a version string.

        Raises:
            ValueError: If the string is not a compiler version
        """
        match = _VERSION_RE.match(value.strip())
        if not match:
            raise ValueError(f"Invalid compiler version: {value!r}")
        commit = match.group("commit")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            pre=match.group("pre") or None,
            commit=commit.lower() if commit else None,
        )

    @property
    def release(self) -> str:
        """Version without the commit hash (e.g. "0.3.7", "0.4.0rc6")."""
        return f"{self.major}.{self.minor}.{self.patch}{self.pre or ''}"

    @property
    def is_prerelease(self) -> bool:
        return self.pre is not None

    @property
    def triple(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def sort_key(self) -> tuple:
        pre_key = _prerelease_key(self.pre) if self.pre else ()
        return (self.major, self.minor, self.patch, 0 if self.pre else 1, pre_key)

    def same_release(self, other: CompilerVersion) -> bool:
        return self.sort_key() == other.sort_key()

    def satisfies_request(self, requested: CompilerVersion) -> bool:
        """Whether this cataloged version answers a request for `requested`.

        A request without a commit hash matches any build of the same release.
        """
        if not self.same_release(requested):
            return False
        return requested.commit is None or requested.commit == self.commit

    def __lt__(self, other: CompilerVersion) -> bool:
        if not isinstance(other, CompilerVersion):
            return NotImplemented
        return (self.sort_key(), self.commit or "") < (other.sort_key(), other.commit or "")

    def __le__(self, other: CompilerVersion) -> bool:
        return self == other or self < other

    def __gt__(self, other: CompilerVersion) -> bool:
        if not isinstance(other, CompilerVersion):
            return NotImplemented
        return other < self

    def __ge__(self, other: CompilerVersion) -> bool:
        return self == other or self > other

    def __str__(self) -> str:
        if self.commit:
            return f"v{self.release}+commit.{self.commit}"
        return f"v{self.release}"


def _parse_partial(value: str) -> CompilerVersion:
    """Parse a possibly partial version ("0.3" -> 0.3.0) used in constraints."""
    text = value.lstrip("v")
    head = re.match(r"\d+(?:\.\d+){0,2}", text)
    if head is None:
        raise ValueError(f"Invalid version in constraint: {value!r}")
    numbers = head.group(0).split(".")
    while len(numbers) < 3:
        numbers.append("0")
    return CompilerVersion.parse(".".join(numbers) + text[head.end() :])


@dataclass(frozen=True)
class _Comparator:
    op: str
    version: CompilerVersion

    def test(self, candidate: CompilerVersion) -> bool:
        left, right = candidate.sort_key(), self.version.sort_key()
        if self.op in ("=", "=="):
            return left == right
        if self.op == "!=":
            return left != right
        if self.op == ">=":
            return left >= right
        if self.op == ">":
            return left > right
        if self.op == "<=":
            return left <= right
        if self.op == "<":
            return left < right
        raise ValueError(f"Unknown comparator: {self.op}")


def _expand(op: str, version: CompilerVersion) -> list[_Comparator]:
    if op == "^":
        if version.major > 0:
            upper = CompilerVersion(version.major + 1, 0, 0)
        elif version.minor > 0:
            upper = CompilerVersion(0, version.minor + 1, 0)
        else:
            upper = CompilerVersion(0, 0, version.patch + 1)
        return [_Comparator(">=", version), _Comparator("<", upper)]
    if op == "~":
        upper = CompilerVersion(version.major, version.minor + 1, 0)
        return [_Comparator(">=", version), _Comparator("<", upper)]
    return [_Comparator(op or "=", version)]


@dataclass(frozen=True)
class VersionConstraint:
    """A set of acceptable compiler versions.

    Supports "^0.3.7", "~0.3.7", ">=0.3.1 <0.4.0", ">=0.3.1, <0.4.0",
    "0.3.7" and "||" alternatives. Prereleases satisfy a range only when a
    comparator in the same alternative names a prerelease of that release.

    Example:
        >>> constraint = VersionConstraint.parse("^0.3.7")
        >>> constraint.matches(CompilerVersion.parse("0.3.9"))
        True
        >>> constraint.matches(CompilerVersion.parse("0.4.0"))
        False
    """

    raw: str
    alternatives: tuple[tuple[_Comparator, ...], ...]

    @classmethod
    def parse(cls, value: str) -> VersionConstraint:
        """Parse a constraint string.

        Raises:
            ValueError: If the constraint cannot be parsed
        """
        alternatives = []
        for part in value.split("||"):
            text = part.replace(",", " ").strip()
            comparators: list[_Comparator] = []
            position = 0
            for match in _COMPARATOR_RE.finditer(text):
                if text[position : match.start()].strip():
                    raise ValueError(f"Invalid version constraint: {value!r}")
                comparators.extend(_expand(match.group("op") or "", _parse_partial(match.group("version"))))
                position = match.end()
            if text[position:].strip() or not comparators:
                raise ValueError(f"Invalid version constraint: {value!r}")
            alternatives.append(tuple(comparators))
        return cls(raw=value.strip(), alternatives=tuple(alternatives))

    def matches(self, version: CompilerVersion) -> bool:
        for comparators in self.alternatives:
            if not all(c.test(version) for c in comparators):
                continue
            if version.is_prerelease and not any(
                c.version.is_prerelease and c.version.triple == version.triple for c in comparators
            ):
                continue
            return True
        return False

    def __str__(self) -> str:
        return self.raw
