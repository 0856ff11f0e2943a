"""
This module contains the `CodeWriter` class, which turns code blocks and declarations into text.
"""

import logging

from contextlib import contextmanager
from typing import Any, ContextManager, FrozenSet, Iterable, TextIO

from atmfjstc.lib.java_codegen.CodegenContext import CodegenContext
from atmfjstc.lib.java_codegen.LineWrapper import LineWrapper
from atmfjstc.lib.java_codegen.resolution import SymbolResolver
from atmfjstc.lib.java_codegen.ast.base import Declaration
from atmfjstc.lib.java_codegen.ast.code import CodeBlock, string_literal
from atmfjstc.lib.java_codegen.ast.modifiers import Modifier, sorted_modifiers
from atmfjstc.lib.java_codegen.ast.names import QualifiedName, TypeName


LOG = logging.getLogger(__name__)


CONTINUATION_INDENT = 1
"""The number of extra indentation levels for the continuation lines of a statement or wrapped line"""


class CodeWriter:
    """
    Renders code blocks to an output sink, expanding placeholders and keeping track of the indentation, statements and
    doc comments.

    All text goes through a `LineWrapper`, and the spelling of all qualified names is delegated to a `SymbolResolver`.
    The writer itself does not own any declaration; the declarations drive it by calling its `emit*` methods.
    """

    _context: CodegenContext
    _out: LineWrapper
    _resolver: SymbolResolver

    _indent_level: int = 0
    _javadoc: bool = False
    _comment: bool = False
    _trailing_newline: bool = False

    # -1 when not inside a statement, otherwise the number of lines of the current statement emitted so far
    _statement_line: int = -1

    def __init__(self, sink: TextIO, context: CodegenContext, resolver: SymbolResolver):
        self._context = context
        self._out = LineWrapper(sink, context.indent_unit, context.width)
        self._resolver = resolver

    @property
    def context(self) -> CodegenContext:
        return self._context

    @property
    def resolver(self) -> SymbolResolver:
        return self._resolver

    @property
    def indent_level(self) -> int:
        return self._indent_level

    def indent(self, levels: int = 1) -> 'CodeWriter':
        self._indent_level += levels
        return self

    def unindent(self, levels: int = 1) -> 'CodeWriter':
        if self._indent_level - levels < 0:
            raise ValueError(f"Cannot unindent {levels} from {self._indent_level}")

        self._indent_level -= levels
        return self

    @contextmanager
    def indented(self, levels: int = 1) -> ContextManager[None]:
        """
        Use ``with writer.indented(): <code>`` to indent the code emitted in a block. The indentation is restored even
        if the emission fails.
        """
        self.indent(levels)
        try:
            yield
        finally:
            self.unindent(levels)

    @contextmanager
    def type_scope(self, type_name: str, nested_names: Iterable[str]) -> ContextManager[None]:
        """
        Use ``with writer.type_scope(name, nested_names): <code>`` while emitting the body of a type declaration, so
        that names nested in the type can be referred to briefly. A `type_name` of None signals an anonymous type.
        """
        frame = self._resolver.frame_for(type_name, nested_names)

        if self._context.trace:
            LOG.debug("Entering type %s", frame.name.canonical_name if frame.name is not None else '<anonymous>')

        self._resolver.push_scope(frame)
        try:
            yield
        finally:
            self._resolver.pop_scope()

            if self._context.trace:
                LOG.debug("Leaving type %s", frame.name.canonical_name if frame.name is not None else '<anonymous>')

    @contextmanager
    def statement_scope(self) -> ContextManager[None]:
        """
        Nested types interrupt the wrapped statement indentation. Use ``with writer.statement_scope(): <code>`` around
        their emission so that the state of the enclosing statement is stashed and restored afterwards.
        """
        previous_statement_line = self._statement_line
        self._statement_line = -1
        try:
            yield
        finally:
            self._statement_line = previous_statement_line

    def lookup_name(self, name: QualifiedName) -> str:
        return self._resolver.lookup_name(name, suggest=not self._javadoc)

    def emit(self, format_: str, *args: Any) -> 'CodeWriter':
        return self.emit_code(CodeBlock.of(format_, *args))

    def emit_code(self, code_block: CodeBlock, ensure_trailing_newline: bool = False) -> 'CodeWriter':
        for part, arg in code_block.iter_parts():
            if part == '%L':
                self._emit_literal(arg)
            elif part == '%N':
                self.emit_and_indent(arg)
            elif part == '%S':
                self.emit_and_indent(
                    string_literal(arg, self._context.indent_unit) if arg is not None else 'null'
                )
            elif part == '%T':
                arg.emit(self)
            elif part == '%%':
                self.emit_and_indent('%')
            elif part == '%>':
                self.indent()
            elif part == '%<':
                self.unindent()
            elif part == '%[':
                self._statement_line = 0
            elif part == '%]':
                if self._statement_line > 0:
                    self.unindent(CONTINUATION_INDENT)
                self._statement_line = -1
            elif part == '%W':
                self._out.wrapping_space(self._indent_level + CONTINUATION_INDENT)
            elif part == '%Z':
                self._out.zero_width_space(self._indent_level + CONTINUATION_INDENT)
            else:
                self.emit_and_indent(part)

        if ensure_trailing_newline and not self._trailing_newline:
            self.emit_and_indent('\n')

        return self

    def _emit_literal(self, value):
        if isinstance(value, (CodeBlock, TypeName)):
            value.emit(self)
        elif isinstance(value, Declaration):
            value.emit_as_literal(self)
        elif isinstance(value, bool):
            self.emit_and_indent('true' if value else 'false')
        elif value is None:
            self.emit_and_indent('null')
        else:
            self.emit_and_indent(str(value))

    def emit_wrapping_space(self) -> 'CodeWriter':
        self._out.wrapping_space(self._indent_level + CONTINUATION_INDENT)
        return self

    def emit_and_indent(self, text: str) -> 'CodeWriter':
        """
        Emits text, adding the indentation (and doc comment prefixes) at the beginning of each line.
        """
        for index, line in enumerate(text.split('\n')):
            if index > 0:
                if (self._javadoc or self._comment) and self._trailing_newline:
                    self._emit_indentation()
                    self._out.append(' *' if self._javadoc else '//')

                self._out.append('\n')
                self._trailing_newline = True

                if self._statement_line != -1:
                    if self._statement_line == 0:
                        self.indent(CONTINUATION_INDENT)  # Continuation lines of a statement are indented
                    self._statement_line += 1

            if line == '':
                continue

            if self._trailing_newline:
                self._emit_indentation()
                if self._javadoc:
                    self._out.append(' * ')
                elif self._comment:
                    self._out.append('// ')

            self._out.append(line)
            self._trailing_newline = False

        return self

    def _emit_indentation(self):
        for _ in range(self._indent_level):
            self._out.append(self._context.indent_unit)

    def emit_javadoc(self, javadoc: CodeBlock):
        if javadoc.is_empty():
            return

        self.emit('/**\n')
        self._javadoc = True
        try:
            self.emit_code(javadoc, ensure_trailing_newline=True)
        finally:
            self._javadoc = False
        self.emit(' */\n')

    def emit_comment(self, comment: CodeBlock):
        self._trailing_newline = True  # Force the '//' prefix for the first line
        self._comment = True
        try:
            self.emit_code(comment)
            self.emit('\n')
        finally:
            self._comment = False

    def emit_annotations(self, annotations: Iterable[Declaration], inline: bool):
        for annotation in annotations:
            annotation.emit(self, inline)
            self.emit(' ' if inline else '\n')

    def emit_modifiers(self, modifiers: FrozenSet[Modifier], implicit_modifiers: FrozenSet[Modifier] = frozenset()):
        for modifier in sorted_modifiers(modifiers):
            if modifier in implicit_modifiers:
                continue

            self.emit_and_indent(modifier.keyword)
            self.emit_and_indent(' ')

    def emit_type_variables(self, type_variables: Iterable[TypeName]):
        type_variables = list(type_variables)
        if len(type_variables) == 0:
            return

        self.emit('<')

        for index, type_variable in enumerate(type_variables):
            if index > 0:
                self.emit(', ')

            self.emit('%L', type_variable.name)

            for bound_index, bound in enumerate(type_variable.bounds):
                self.emit(' extends %T' if bound_index == 0 else ' & %T', bound)

        self.emit('>')

    def close(self):
        self._out.close()
