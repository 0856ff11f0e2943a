from collections import OrderedDict
from typing import Any, List

from atmfjstc.lib.py_lang_utils.iteration import iter_with_first, iter_with_last

from atmfjstc.lib.java_codegen.ast.base import Declaration, DeclarationSnapshot, check_valid_name
from atmfjstc.lib.java_codegen.ast.code import CodeBlock
from atmfjstc.lib.java_codegen.ast.names import QualifiedName


class AnnotationSnapshot(DeclarationSnapshot):
    AST_NODE_CONFIG = (
        ('CHILD', 'type', dict(type=QualifiedName)),
        ('PARAM', 'members', dict(type=tuple, default=())),
    )


class AnnotationSpec(Declaration):
    """
    The use of an annotation on a declaration, e.g. ``@Override`` or ``@SuppressWarnings("unchecked")``.

    Each member can have one or more values. A member with several values is rendered as an array, i.e. ``{a, b}``.
    """

    @staticmethod
    def builder(type_: QualifiedName) -> 'AnnotationSpecBuilder':
        return AnnotationSpecBuilder(type_)

    @staticmethod
    def of(type_: QualifiedName) -> 'AnnotationSpec':
        return AnnotationSpecBuilder(type_).build()

    def _materialize(self, builder):
        return AnnotationSnapshot(
            builder.type,
            tuple((name, tuple(values)) for name, values in builder.members.items())
        )

    def to_builder(self) -> 'AnnotationSpecBuilder':
        builder = AnnotationSpecBuilder(self.type)
        for name, values in self.members:
            for value in values:
                builder.add_member_code(name, value)

        return builder

    def emit(self, code_writer, inline: bool = True):
        whitespace = '' if inline else '\n'
        member_separator = ', ' if inline else ',\n'

        if len(self.members) == 0:
            code_writer.emit('@%T', self.type)
        elif len(self.members) == 1 and self.members[0][0] == 'value':
            code_writer.emit('@%T(', self.type)
            self._emit_values(code_writer, whitespace, member_separator, self.members[0][1])
            code_writer.emit(')')
        else:
            code_writer.emit('@%T(' + whitespace, self.type)

            with code_writer.indented(2):
                for (name, values), is_last in iter_with_last(self.members):
                    code_writer.emit('%L = ', name)
                    self._emit_values(code_writer, whitespace, member_separator, values)
                    if not is_last:
                        code_writer.emit(member_separator)

            code_writer.emit(whitespace + ')')

    @staticmethod
    def _emit_values(code_writer, whitespace, member_separator, values):
        if len(values) == 1:
            with code_writer.indented(2):
                code_writer.emit_code(values[0])
            return

        code_writer.emit('{' + whitespace)

        with code_writer.indented(2):
            for value, is_first in iter_with_first(values):
                if not is_first:
                    code_writer.emit(member_separator)
                code_writer.emit_code(value)

        code_writer.emit(whitespace + '}')

    def emit_as_literal(self, code_writer):
        self.emit(code_writer, inline=True)


class AnnotationSpecBuilder:
    type: QualifiedName
    members: 'OrderedDict[str, List[CodeBlock]]'

    def __init__(self, type_: QualifiedName):
        if not isinstance(type_, QualifiedName):
            raise TypeError(f"Expected a qualified name for the annotation type, got {type_!r}")

        self.type = type_
        self.members = OrderedDict()

    def add_member(self, name: str, format_: str, *args: Any) -> 'AnnotationSpecBuilder':
        return self.add_member_code(name, CodeBlock.of(format_, *args))

    def add_member_code(self, name: str, value: CodeBlock) -> 'AnnotationSpecBuilder':
        check_valid_name(name, 'annotation member name')
        self.members.setdefault(name, []).append(value)

        return self

    def build(self) -> AnnotationSpec:
        return AnnotationSpec(self)
