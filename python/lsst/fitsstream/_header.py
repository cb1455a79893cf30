# This file is part of lsst-fitsstream.
#
# Developed for the LSST Data Management System.
# This product includes software developed by the LSST Project
# (https://www.lsst.org).
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

__all__ = ("CARD_SIZE", "END_KEYWORD", "Header", "HeaderValue", "parse_card")

import dataclasses
from collections.abc import Iterable, Iterator, Mapping

from ._errors import FormatError

CARD_SIZE = 80
"""Size of a single header card in bytes."""

END_KEYWORD = "END"
"""Keyword that terminates a header."""

_KEYWORD_SIZE = 8
_COMMENT_DIVIDER = "/ "


@dataclasses.dataclass(frozen=True)
class HeaderValue:
    """The value and comment of a single header keyword."""

    value: str
    """Trimmed value string, exactly as it appears in the card (`str`).

    String values keep their enclosing single quotes; see `as_str`.
    """

    comment: str = ""
    """Free-text comment following the value (`str`)."""

    def append(self, additional: str) -> HeaderValue:
        """Return a new value with ``additional`` concatenated to this value
        and the comment unchanged.
        """
        return HeaderValue(self.value + additional, self.comment)

    def with_comment(self) -> str:
        """Return the value and comment in card form."""
        return f"{self.value} / {self.comment}"

    def as_int(self) -> int:
        """Interpret the value as an integer.

        Raises
        ------
        FormatError
            Raised if the value is not an integer.
        """
        try:
            return int(self.value)
        except ValueError as err:
            raise FormatError(f"Header value {self.value!r} is not an integer.") from err

    def as_str(self) -> str:
        """Interpret the value as a string, removing any enclosing quotes and
        the trailing blanks FITS pads quoted strings with.
        """
        value = self.value
        if len(value) >= 2 and value.startswith("'") and value.endswith("'"):
            value = value[1:-1].replace("''", "'")
        return value.rstrip()


def parse_card(card: bytes) -> tuple[str, HeaderValue]:
    """Parse a single 80-byte header card.

    Parameters
    ----------
    card
        Raw card bytes.

    Returns
    -------
    keyword
        Trimmed keyword from the first eight columns.
    value
        Value and comment from columns 10-80.  The value/comment split is
        on the last ``"/ "`` in those columns; without one, the whole field
        is the value.

    Notes
    -----
    The value indicator in column 9 is skipped without being checked, so
    commentary cards like ``HISTORY`` parse the same way as value cards.
    """
    if len(card) != CARD_SIZE:
        raise FormatError(f"Header card must be {CARD_SIZE} bytes; got {len(card)}.")
    try:
        text = card.decode("ascii")
    except UnicodeDecodeError as err:
        raise FormatError(f"Header card {card!r} is not ASCII.") from err
    keyword = text[:_KEYWORD_SIZE].strip()
    rhs = text[_KEYWORD_SIZE + 1 :]
    value, divider, comment = rhs.rpartition(_COMMENT_DIVIDER)
    if not divider:
        return keyword, HeaderValue(rhs.strip())
    return keyword, HeaderValue(value.strip(), comment.strip())


class Header(Mapping[str, HeaderValue]):
    """An immutable ordered mapping from keyword to `HeaderValue`.

    Parameters
    ----------
    cards
        Parsed ``(keyword, value)`` pairs, in card order.

    Notes
    -----
    Keywords keep the order in which they first appear.  A keyword that
    appears again has its new value appended to the old one, separated by a
    newline, which is how ``COMMENT``, ``HISTORY`` and ``CONTINUE`` cards
    accumulate.  The first card's comment is kept.
    """

    def __init__(self, cards: Iterable[tuple[str, HeaderValue]] = ()) -> None:
        self._values: dict[str, HeaderValue] = {}
        for keyword, value in cards:
            self._add(keyword, value)

    def _add(self, keyword: str, value: HeaderValue) -> None:
        if (existing := self._values.get(keyword)) is not None:
            self._values[keyword] = existing.append("\n" + value.value)
        else:
            self._values[keyword] = value

    def get_int(self, keyword: str, default: int) -> int:
        """Return a keyword's value as an integer, or ``default`` if it is
        absent.
        """
        if (value := self._values.get(keyword)) is None:
            return default
        return value.as_int()

    def get_str(self, keyword: str) -> str | None:
        """Return a keyword's value as an unquoted string, or `None` if it
        is absent.
        """
        if (value := self._values.get(keyword)) is None:
            return None
        return value.as_str()

    def __getitem__(self, keyword: str) -> HeaderValue:
        return self._values[keyword]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __str__(self) -> str:
        return "\n".join(f"{k} = {v.value}" for k, v in self._values.items())

    def __repr__(self) -> str:
        return f"Header({self._values!r})"
