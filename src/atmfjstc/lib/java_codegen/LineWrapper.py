"""
This module contains the `LineWrapper` class, which sits between the code writer and the output sink and breaks lines
that would exceed the column limit.
"""

from enum import Enum
from typing import List, Optional, TextIO


class _FlushType(Enum):
    WRAP = 'wrap'
    SPACE = 'space'
    EMPTY = 'empty'


class LineWrapper:
    """
    Writes text to a sink, converting wrapping spaces into newlines when a line would otherwise exceed the column limit.

    A wrapping space is a point where the line may be broken without changing the meaning of the code. The writer
    inserts one via `wrapping_space()` (rendered as either a space or a newline) or `zero_width_space()` (rendered as
    either nothing or a newline). Only the most recent such point is kept pending: any text appended after it is
    buffered, and as soon as the buffered text would cross the column limit, the pending point is turned into a newline
    followed by the indentation requested for continuation lines. If there is no pending point, the line is allowed to
    overflow, as there is no safe place to break it.

    Note that the column is measured in characters, so a tab counts as a single column.
    """

    _sink: TextIO
    _indent_unit: str
    _column_limit: int

    _buffer: List[str]
    _column: int = 0
    _closed: bool = False

    _next_flush: Optional[_FlushType] = None
    _indent_level: int = -1

    def __init__(self, sink: TextIO, indent_unit: str, column_limit: int):
        self._sink = sink
        self._indent_unit = indent_unit
        self._column_limit = column_limit
        self._buffer = []

    @property
    def column(self) -> int:
        return self._column

    def append(self, text: str):
        """Emits `text`. It may contain newlines, but it will never be broken by the wrapper."""
        self._require_open()

        if self._next_flush is not None:
            next_newline = text.find('\n')

            # If the text fits on the current line, buffer it and decide later whether the pending space must wrap
            if next_newline == -1 and self._column + len(text) <= self._column_limit:
                self._buffer.append(text)
                self._column += len(text)
                return

            # Wrap if appending the text would overflow the current line
            wrap = (next_newline == -1) or (self._column + next_newline > self._column_limit)
            self._flush(_FlushType.WRAP if wrap else self._next_flush)

        self._sink.write(text)

        last_newline = text.rfind('\n')
        if last_newline != -1:
            self._column = len(text) - last_newline - 1
        else:
            self._column += len(text)

    def wrapping_space(self, indent_level: int):
        """Emits a space, or a newline followed by `indent_level` indents if the line turns out to be too long"""
        self._require_open()

        if self._next_flush is not None:
            self._flush(self._next_flush)

        self._column += 1
        self._next_flush = _FlushType.SPACE
        self._indent_level = indent_level

    def zero_width_space(self, indent_level: int):
        """Emits nothing, or a newline followed by `indent_level` indents if the line turns out to be too long"""
        self._require_open()

        if self._column == 0:
            return

        if self._next_flush is not None:
            self._flush(self._next_flush)

        self._next_flush = _FlushType.EMPTY
        self._indent_level = indent_level

    def close(self):
        """Flushes any pending text. The wrapper cannot be used after this."""
        if self._next_flush is not None:
            self._flush(self._next_flush)

        self._closed = True

    def _flush(self, flush_type: _FlushType):
        if flush_type == _FlushType.WRAP:
            indent = self._indent_unit * self._indent_level
            self._sink.write('\n' + indent)
            self._column = len(indent)
        elif flush_type == _FlushType.SPACE:
            self._sink.write(' ')

        text = ''.join(self._buffer)
        self._sink.write(text)

        if flush_type == _FlushType.WRAP:
            self._column += len(text)

        self._buffer.clear()
        self._indent_level = -1
        self._next_flush = None

    def _require_open(self):
        if self._closed:
            raise ValueError("Line wrapper is closed")
