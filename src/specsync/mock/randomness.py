"""Randomness provider used by the mock generator.

The generator never draws random values itself; it asks a
:class:`RandomnessProvider`. The default implementation,
:class:`FakerRandomness`, combines `Faker <https://faker.readthedocs.io>`_ for
realistic words, e-mails, URLs, UUIDs and dates with
`rstr <https://github.com/leapfrogonline/rstr>`_ for strings matching a
regular expression. Tests can substitute any object with the same methods.
"""

from __future__ import annotations

import logging
import random
import re
import string
import threading
from collections.abc import Sequence
from datetime import timezone
from re import _parser
from typing import Any, Optional, Protocol

import rstr
from faker import Faker
from rstr.xeger import STAR_PLUS_LIMIT

logger = logging.getLogger(__name__)

_ALPHANUMERIC = string.ascii_letters + string.digits

# Longest match a pattern may have before it is refused without generating.
_MAX_PATTERN_LENGTH = 10_000

_REPEATS = (_parser.MAX_REPEAT, _parser.MIN_REPEAT, _parser.POSSESSIVE_REPEAT)


class _PatternRstr(rstr.Rstr):
    """rstr generator that honours required repeat counts above its cap.

    rstr clamps every repeat to ``STAR_PLUS_LIMIT``, which breaks patterns
    such as ``[a-f0-9]{128}``; the required part is emitted in chunks.
    """

    def _handle_repeat(self, start_range: int, end_range: int, value: Any) -> str:
        if start_range <= STAR_PLUS_LIMIT:
            return super()._handle_repeat(start_range, end_range, value)
        head = super()._handle_repeat(STAR_PLUS_LIMIT, STAR_PLUS_LIMIT, value)
        return head + self._handle_repeat(
            start_range - STAR_PLUS_LIMIT, end_range - STAR_PLUS_LIMIT, value
        )


def _max_length(parsed: Any, groups: dict[int, int]) -> int:
    """Longest string rstr can produce for a parsed pattern.

    Unbounded and large optional repeats count as ``STAR_PLUS_LIMIT``, the
    most rstr ever draws for them.
    """
    total = 0
    for op, av in parsed:
        if op in _REPEATS:
            low, high, sub = av
            total += max(low, min(high, STAR_PLUS_LIMIT)) * _max_length(sub, groups)
        elif op is _parser.SUBPATTERN:
            length = _max_length(av[-1], groups)
            if av[0] is not None:
                groups[av[0]] = length
            total += length
        elif op is _parser.ATOMIC_GROUP:
            total += _max_length(av, groups)
        elif op is _parser.BRANCH:
            total += max((_max_length(branch, groups) for branch in av[1]), default=0)
        elif op is _parser.GROUPREF_EXISTS:
            _, yes, no = av
            total += max(_max_length(yes, groups), _max_length(no, groups) if no else 0)
        elif op is _parser.GROUPREF:
            total += groups.get(av, 0)
        elif op is _parser.ASSERT:
            total += _max_length(av[1], groups)
        elif op in (_parser.AT, _parser.ASSERT_NOT):
            continue
        else:
            total += 1
    return total


class PatternSynthesisError(ValueError):
    """No string could be produced for a regular expression in time."""


class RandomnessProvider(Protocol):
    """Source of random example values."""

    def word(self) -> str: ...

    def alphanumeric(self, min_length: int, max_length: int) -> str: ...

    def from_pattern(self, pattern: str) -> str: ...

    def integer(self, low: int, high: int) -> int: ...

    def decimal(self, low: float, high: float, digits: int = 2) -> float: ...

    def boolean(self) -> bool: ...

    def choice(self, options: Sequence[Any]) -> Any: ...

    def email(self) -> str: ...

    def uuid(self) -> str: ...

    def date(self) -> str: ...

    def date_time(self) -> str: ...

    def uri(self) -> str: ...


class FakerRandomness:
    """Faker/rstr backed :class:`RandomnessProvider`.

    Args:
        seed: Seed for reproducible output. ``None`` draws fresh values on
            every run.
        pattern_timeout: Seconds allowed for one regular-expression string.
            Degenerate patterns that exceed it raise
            :class:`PatternSynthesisError`.
        locale: Faker locale.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        pattern_timeout: float = 1.0,
        locale: str = "en_US",
    ) -> None:
        self._faker = Faker(locale)
        if seed is not None:
            self._faker.seed_instance(seed)
        self._random = self._faker.random
        self._pattern_timeout = pattern_timeout

    def word(self) -> str:
        return self._faker.word()

    def alphanumeric(self, min_length: int, max_length: int) -> str:
        length = self._random.randint(min_length, max_length)
        return "".join(self._random.choice(_ALPHANUMERIC) for _ in range(length))

    def from_pattern(self, pattern: str) -> str:
        """Return a string matching *pattern*.

        Patterns whose longest possible match exceeds
        ``_MAX_PATTERN_LENGTH`` characters are rejected up front. The rest
        are generated on a daemon thread with its own random stream, so a
        run that outlives ``pattern_timeout`` is abandoned without
        disturbing seeded output or delaying interpreter exit.

        Raises:
            PatternSynthesisError: If the pattern is invalid, too long, or
                generation exceeds the time limit.
        """
        try:
            length = _max_length(_parser.parse(pattern), {})
        except (re.error, OverflowError, RecursionError) as exc:
            raise PatternSynthesisError(f"Cannot synthesise pattern {pattern!r}: {exc}") from exc
        if length > _MAX_PATTERN_LENGTH:
            raise PatternSynthesisError(
                f"Pattern {pattern!r} can match up to {length} characters"
            )

        generator = _PatternRstr(random.Random(self._random.getrandbits(64)))
        result: list[str] = []
        failure: list[Exception] = []

        def _run() -> None:
            try:
                result.append(generator.xeger(pattern))
            except Exception as exc:
                # KeyError, ValueError and friends from rstr's regex walk
                failure.append(exc)

        thread = threading.Thread(target=_run, name="specsync-xeger", daemon=True)
        thread.start()
        thread.join(self._pattern_timeout)
        if thread.is_alive():
            raise PatternSynthesisError(
                f"Pattern {pattern!r} took longer than {self._pattern_timeout}s"
            )
        if failure:
            raise PatternSynthesisError(
                f"Cannot synthesise pattern {pattern!r}: {failure[0]}"
            ) from failure[0]
        return result[0]

    def integer(self, low: int, high: int) -> int:
        return self._random.randint(low, high)

    def decimal(self, low: float, high: float, digits: int = 2) -> float:
        value = round(self._random.uniform(low, high), digits)
        # rounding may step just outside the bounds
        return min(max(value, low), high)

    def boolean(self) -> bool:
        return self._faker.pybool()

    def choice(self, options: Sequence[Any]) -> Any:
        return self._random.choice(list(options))

    def email(self) -> str:
        return self._faker.email()

    def uuid(self) -> str:
        return self._faker.uuid4()

    def date(self) -> str:
        return self._recent().date().isoformat()

    def date_time(self) -> str:
        return self._recent().isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def uri(self) -> str:
        return self._faker.url()

    def _recent(self):  # noqa: ANN202
        return self._faker.date_time_between(
            start_date="-1d", end_date="now", tzinfo=timezone.utc
        )
