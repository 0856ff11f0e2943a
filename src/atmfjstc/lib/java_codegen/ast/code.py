"""
Template fragments: snippets of code with placeholders for names, literals and types.

A `CodeBlock` is created from a format string and a list of arguments, much like ``str.format``, except that the
placeholders are typed so that the renderer knows what to do with each argument:

- ``%L`` emits a *literal* value with no escaping. Arguments may be strings, numbers, booleans (rendered as
  ``true``/``false``), None (rendered as ``null``), type names, nested code blocks, or declarations (e.g. an anonymous
  class, an annotation).
- ``%S`` emits a *string* argument as a quoted, escaped string literal. None is rendered as ``null``.
- ``%T`` emits a *type* reference. Qualified names will be abbreviated to their simple name whenever that does not
  cause ambiguity, with the necessary import added to the file.
- ``%N`` emits a *name*, i.e. an identifier that needs no resolution. The argument may be a string, or a declaration
  (parameter, field, method, type) whose name is to be used.
- ``%%`` emits a percent sign.
- ``%W`` emits a space or a newline, depending on whether the line fits in the available width.
- ``%Z`` acts as a zero-width space, i.e. a point where the line may be broken if it is too long.
- ``%>`` increases the indentation level, ``%<`` decreases it.
- ``%[`` begins a statement, ``%]`` ends it. Continuation lines of a multi-line statement get an extra level of
  indentation.

Arguments can be consumed in order (``%L``) or by their 1-based position (``%2L``), but the two styles may not be mixed
within the same format string. Every argument must be used. Alternatively, `CodeBlockBuilder.add_named` takes a
mapping of arguments, referred to by name (``%count:L``).

All the checks on a code block happen when it is constructed. A bad format string, a mismatched argument count,
unbalanced indentation or an unclosed control flow block all cause a `ConstructionError` right away, so a code block
that exists is always safe to render.
"""

import re

from typing import Any, Iterable, List, Mapping, Optional, Tuple

from atmfjstc.lib.py_lang_utils.iteration import iter_with_first
from atmfjstc.lib.text_utils import check_single_line

from atmfjstc.lib.java_codegen.errors import ConstructionError
from atmfjstc.lib.java_codegen.ast.base import JavaCodegenASTNode
from atmfjstc.lib.java_codegen.ast.names import TypeName


ARG_PLACEHOLDERS = frozenset('LSTN')
NO_ARG_PLACEHOLDERS = frozenset('%><[]WZ')


def is_placeholder(part: str) -> bool:
    return len(part) == 2 and part[0] == '%'


def _check_format_parts(parts):
    for part in parts:
        if not isinstance(part, str) or part == '':
            raise ConstructionError(f"Invalid format part: {part!r}")
        if part.startswith('%') and not (is_placeholder(part) and (part[1] in ARG_PLACEHOLDERS | NO_ARG_PLACEHOLDERS)):
            raise ConstructionError(f"Invalid placeholder: {part!r}")


class CodeBlock(JavaCodegenASTNode):
    """
    An immutable fragment of code, stored as a sequence of literal text runs and placeholders (e.g. ``'%T'``), along
    with the arguments consumed by the placeholders, in order.

    Use `CodeBlock.of()` or `CodeBlock.builder()` to create one, rather than instantiating it directly.
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'format_parts', dict(type=tuple, check=_check_format_parts)),
        ('PARAM', 'args', dict(type=tuple, default=())),
    )

    def _sanity_check_post_init(self):
        n_consumers = sum(1 for part in self.format_parts if is_placeholder(part) and part[1] in ARG_PLACEHOLDERS)
        if n_consumers != len(self.args):
            raise ConstructionError(f"Expected {n_consumers} arguments, got {len(self.args)}")

        state = _StructureState()
        state.scan(self.format_parts)
        state.check_closed()

    @staticmethod
    def of(format_: str, *args: Any) -> 'CodeBlock':
        return CodeBlockBuilder().add(format_, *args).build()

    @staticmethod
    def builder() -> 'CodeBlockBuilder':
        return CodeBlockBuilder()

    @staticmethod
    def join(blocks: Iterable['CodeBlock'], separator: str) -> 'CodeBlock':
        """
        Joins code blocks into a single one, with `separator` (a format string that takes no arguments) inserted
        between each pair.
        """
        builder = CodeBlockBuilder()

        for block, is_first in iter_with_first(blocks):
            if not is_first:
                builder.add(separator)
            builder.add_code(block)

        return builder.build()

    def is_empty(self) -> bool:
        return len(self.format_parts) == 0

    def to_builder(self) -> 'CodeBlockBuilder':
        return CodeBlockBuilder().add_code(self)

    def iter_parts(self) -> Iterable[Tuple[str, Any]]:
        """
        Iterates through the parts of this block, yielding (part, argument) pairs. The argument is None for parts that
        do not consume one.
        """
        args = iter(self.args)

        for part in self.format_parts:
            if is_placeholder(part) and part[1] in ARG_PLACEHOLDERS:
                yield part, next(args)
            else:
                yield part, None

    def emit(self, code_writer):
        code_writer.emit_code(self)


class _StructureState:
    """Tracks the indentation depth and open statement of a code block, so as to reject unbalanced fragments."""
    indent_depth: int = 0
    statement_open: bool = False

    def copy(self) -> '_StructureState':
        other = _StructureState()
        other.indent_depth = self.indent_depth
        other.statement_open = self.statement_open

        return other

    def scan(self, parts: Iterable[str]):
        for part in parts:
            if part == '%>':
                self.indent_depth += 1
            elif part == '%<':
                if self.indent_depth == 0:
                    raise ConstructionError("Unindent (%<) without a matching indent (%>)")
                self.indent_depth -= 1
            elif part == '%[':
                if self.statement_open:
                    raise ConstructionError("Statement start (%[) inside another statement")
                self.statement_open = True
            elif part == '%]':
                if not self.statement_open:
                    raise ConstructionError("Statement end (%]) without a matching statement start (%[)")
                self.statement_open = False

    def check_closed(self):
        if self.indent_depth != 0:
            raise ConstructionError(f"Unbalanced indentation: {self.indent_depth} unmatched indent(s) (%>)")
        if self.statement_open:
            raise ConstructionError("Statement start (%[) without a matching statement end (%])")


EMPTY_CODE = CodeBlock(())


class CodeBlockBuilder:
    """
    Mutable collector for assembling a `CodeBlock` piece by piece. All methods return the builder itself, so that calls
    can be chained.
    """

    _format_parts: List[str]
    _args: List[Any]
    _state: _StructureState
    _control_flows: List[str]

    def __init__(self):
        self._format_parts = []
        self._args = []
        self._state = _StructureState()
        self._control_flows = []

    def is_empty(self) -> bool:
        return len(self._format_parts) == 0

    def add(self, format_: str, *args: Any) -> 'CodeBlockBuilder':
        parts, used_args = parse_format(format_, args)

        return self._append(parts, used_args)

    def add_named(self, format_: str, args: Mapping[str, Any]) -> 'CodeBlockBuilder':
        """
        Like `add`, but the placeholders refer to arguments by name, e.g. ``add_named('%food:T', dict(food=...))``.
        """
        parts, used_args = parse_named_format(format_, args)

        return self._append(parts, used_args)

    def add_code(self, block: CodeBlock) -> 'CodeBlockBuilder':
        return self._append(block.format_parts, block.args)

    def _append(self, parts, args):
        # Check on a copy first, so that a failed add leaves the builder unchanged
        new_state = self._state.copy()
        new_state.scan(parts)

        self._format_parts.extend(parts)
        self._args.extend(args)
        self._state = new_state

        return self

    def add_statement(self, format_: str, *args: Any) -> 'CodeBlockBuilder':
        self.add('%[')
        self.add(format_, *args)
        self.add(';\n%]')

        return self

    def add_comment(self, format_: str, *args: Any) -> 'CodeBlockBuilder':
        check_single_line(format_, 'comment')

        return self.add('// ' + format_ + '\n', *args)

    def indent(self) -> 'CodeBlockBuilder':
        return self.add('%>')

    def unindent(self) -> 'CodeBlockBuilder':
        return self.add('%<')

    def begin_control_flow(self, control_flow: str, *args: Any) -> 'CodeBlockBuilder':
        """
        Opens a control flow block, e.g. ``begin_control_flow('if (%N > 0)', 'x')``. The opening brace and newline are
        added automatically, and the contents of the block will be indented.
        """
        self.add(control_flow + ' {\n', *args)
        self.indent()
        self._control_flows.append(control_flow)

        return self

    def next_control_flow(self, control_flow: str, *args: Any) -> 'CodeBlockBuilder':
        """
        Closes the current control flow block and opens a sibling one, e.g. ``next_control_flow('else')``.
        """
        self._require_open_control_flow('next_control_flow')

        self.unindent()
        self.add('} ' + control_flow + ' {\n', *args)
        self.indent()
        self._control_flows[-1] = control_flow

        return self

    def end_control_flow(self, control_flow: Optional[str] = None, *args: Any) -> 'CodeBlockBuilder':
        """
        Closes the current control flow block. If `control_flow` is specified, it will be added after the closing brace,
        followed by a semicolon (useful for ``do {} while (...);`` constructs).
        """
        self._require_open_control_flow('end_control_flow')

        if control_flow is None and len(args) > 0:
            raise ConstructionError("Arguments given to end_control_flow without a format")

        self.unindent()
        if control_flow is None:
            self.add('}\n')
        else:
            self.add('} ' + control_flow + ';\n', *args)

        self._control_flows.pop()

        return self

    def _require_open_control_flow(self, operation):
        if len(self._control_flows) == 0:
            raise ConstructionError(f"{operation}() called without a matching begin_control_flow()")

    def build(self) -> CodeBlock:
        if len(self._control_flows) > 0:
            raise ConstructionError(f"Unclosed control flow: {self._control_flows[-1]!r}")

        self._state.check_closed()

        return CodeBlock(tuple(self._format_parts), tuple(self._args))


def parse_format(format_: str, args: Tuple[Any, ...]) -> Tuple[List[str], List[Any]]:
    """
    Splits a format string into parts and pairs each argument-consuming placeholder with its (checked) argument.

    Returns:
        A (parts, args) tuple, where the args are in the order in which the parts consume them.
    """
    parts = []
    used_args = []

    has_relative = False
    has_indexed = False
    relative_count = 0
    indexes_used = set()

    pos = 0
    while pos < len(format_):
        if format_[pos] != '%':
            next_pos = format_.find('%', pos + 1)
            if next_pos == -1:
                next_pos = len(format_)

            parts.append(format_[pos:next_pos])
            pos = next_pos
            continue

        pos += 1
        index_start = pos

        while pos < len(format_) and format_[pos].isdigit():
            pos += 1

        if pos >= len(format_):
            raise ConstructionError(f"Dangling format character at the end of {format_!r}")

        index_text = format_[index_start:pos]
        kind = format_[pos]
        pos += 1

        if kind in NO_ARG_PLACEHOLDERS:
            if index_text != '':
                raise ConstructionError(f"%{kind} may not have an index (in {format_!r})")
            parts.append('%' + kind)
            continue

        if kind not in ARG_PLACEHOLDERS:
            raise ConstructionError(f"Invalid format string: '%{index_text}{kind}' in {format_!r}")

        if index_text != '':
            index = int(index_text) - 1
            has_indexed = True
            if not (0 <= index < len(args)):
                raise ConstructionError(
                    f"Index {index + 1} for '%{index_text}{kind}' not in range (received {len(args)} arguments)"
                )
            indexes_used.add(index)
        else:
            index = relative_count
            has_relative = True
            relative_count += 1
            if index >= len(args):
                raise ConstructionError(
                    f"Index {index + 1} for '%{kind}' not in range (received {len(args)} arguments) in {format_!r}"
                )

        if has_indexed and has_relative:
            raise ConstructionError(f"Cannot mix indexed and positional parameters in {format_!r}")

        used_args.append(_coerce_arg(kind, args[index]))
        parts.append('%' + kind)

    if has_indexed:
        unused = [str(index + 1) for index in range(len(args)) if index not in indexes_used]
        if len(unused) > 0:
            raise ConstructionError(f"Unused argument(s): %{', %'.join(unused)} in {format_!r}")
    elif relative_count != len(args):
        raise ConstructionError(
            f"Unused arguments: expected {relative_count}, received {len(args)} in {format_!r}"
        )

    return parts, used_args


_ARG_NAME_RE = re.compile(r'[a-z][a-zA-Z0-9_]*')
_NAMED_PLACEHOLDER_RE = re.compile(r'%([a-z][a-zA-Z0-9_]*):([A-Za-z])')


def parse_named_format(format_: str, args: Mapping[str, Any]) -> Tuple[List[str], List[Any]]:
    """
    Same as `parse_format`, but for format strings with named placeholders (``%name:L``). Arguments that are not
    referred to are allowed.
    """
    for arg_name in args:
        if not isinstance(arg_name, str) or _ARG_NAME_RE.fullmatch(arg_name) is None:
            raise ConstructionError(f"Argument {arg_name!r} must start with a lowercase character")

    parts = []
    used_args = []

    pos = 0
    while pos < len(format_):
        if format_[pos] != '%':
            next_pos = format_.find('%', pos + 1)
            if next_pos == -1:
                next_pos = len(format_)

            parts.append(format_[pos:next_pos])
            pos = next_pos
            continue

        if pos + 1 >= len(format_):
            raise ConstructionError(f"Dangling format character at the end of {format_!r}")

        if format_[pos + 1] in NO_ARG_PLACEHOLDERS:
            parts.append(format_[pos:pos + 2])
            pos += 2
            continue

        match = _NAMED_PLACEHOLDER_RE.match(format_, pos)
        if match is None:
            raise ConstructionError(f"Invalid named placeholder at position {pos} in {format_!r}")

        arg_name, kind = match.groups()
        if kind not in ARG_PLACEHOLDERS:
            raise ConstructionError(f"Invalid format string: {match.group(0)!r} in {format_!r}")
        if arg_name not in args:
            raise ConstructionError(f"Missing named argument for {match.group(0)!r}")

        used_args.append(_coerce_arg(kind, args[arg_name]))
        parts.append('%' + kind)
        pos = match.end()

    return parts, used_args


def _coerce_arg(kind, arg):
    if kind == 'N':
        return _arg_to_name(arg)
    if kind == 'S':
        return None if arg is None else str(arg)
    if kind == 'T':
        if not isinstance(arg, TypeName):
            raise ConstructionError(f"Expected a type name for %T, got {arg!r}")
        return arg

    return arg


def _arg_to_name(arg):
    if isinstance(arg, str):
        return arg

    name = getattr(arg, 'name', None)
    if isinstance(name, str):
        return name

    raise ConstructionError(f"Expected a name for %N, got {arg!r}")


def character_literal(char: str) -> str:
    """Escapes a single character for use inside a character or string literal (without the quotes)"""
    escaped = _ESCAPES.get(char)
    if escaped is not None:
        return escaped

    code = ord(char)
    if code <= 0x1f or 0x7f <= code <= 0x9f:
        return f'\\u{code:04x}'

    return char


_ESCAPES = {
    '\b': '\\b',
    '\t': '\\t',
    '\n': '\\n',
    '\f': '\\f',
    '\r': '\\r',
    '"': '"',
    "'": "\\'",
    '\\': '\\\\',
}


def string_literal(value: str, indent_unit: str = '  ') -> str:
    """
    Returns the double-quoted string literal for a value. A value that spans multiple lines is rendered as a
    concatenation of one literal per line, each continuation line being prefixed with two indentation units.
    """
    result = ['"']

    for index, char in enumerate(value):
        if char == "'":
            result.append("'")
            continue
        if char == '"':
            result.append('\\"')
            continue

        result.append(character_literal(char))

        if char == '\n' and index + 1 < len(value):
            result.append('"\n' + indent_unit * 2 + '+ "')

    result.append('"')

    return ''.join(result)
