from typing import Any

from atmfjstc.lib.java_codegen.errors import ConstructionError
from atmfjstc.lib.java_codegen.ast.base import Declaration, DeclarationSnapshot, is_valid_name
from atmfjstc.lib.java_codegen.ast.code import CodeBlock, CodeBlockBuilder, EMPTY_CODE
from atmfjstc.lib.java_codegen.ast.names import QualifiedName
from atmfjstc.lib.java_codegen.ast.types import TypeSpec


def _check_package_name(package_name):
    if package_name == '':
        return

    for segment in package_name.split('.'):
        if not is_valid_name(segment):
            raise ConstructionError(f"Not a valid package name: {package_name!r}")


class JavaFileSnapshot(DeclarationSnapshot):
    AST_NODE_CONFIG = (
        ('PARAM', 'package_name', dict(type=str, check=_check_package_name)),
        ('PARAM', 'type_spec', dict(type=TypeSpec)),
        ('CHILD', 'file_comment', dict(type=CodeBlock, default=EMPTY_CODE)),
    )


class JavaFile(Declaration):
    """
    A compilation unit: a single top-level type, placed in a package.

    The import lines of the file are not part of the declaration. They are derived from the binding table that is
    passed to the emission pass (see `render`).
    """

    @staticmethod
    def builder(package_name: str, type_spec: TypeSpec) -> 'JavaFileBuilder':
        return JavaFileBuilder(package_name, type_spec)

    def _materialize(self, builder):
        if builder.type_spec.is_anonymous:
            raise ConstructionError("The top-level type of a file cannot be anonymous")

        return JavaFileSnapshot(builder.package_name, builder.type_spec, builder.file_comment.build())

    @property
    def type_name(self) -> QualifiedName:
        return QualifiedName.of(self.package_name, self.type_spec.name)

    @property
    def artifact_name(self) -> str:
        """The name under which the rendered file is identified, i.e. the canonical name of its type"""
        return self.type_name.canonical_name

    def emit(self, code_writer):
        if not self.file_comment.is_empty():
            code_writer.emit_comment(self.file_comment)

        if self.package_name != '':
            code_writer.emit('package %L;\n', self.package_name)
            code_writer.emit('\n')

        imports = code_writer.resolver.bindings.imports_for(self.package_name)
        for name in imports:
            code_writer.emit('import %L;\n', name.canonical_name)
        if len(imports) > 0:
            code_writer.emit('\n')

        self.type_spec.emit(code_writer)


class JavaFileBuilder:
    def __init__(self, package_name: str, type_spec: TypeSpec):
        _check_package_name(package_name)
        if not isinstance(type_spec, TypeSpec):
            raise TypeError(f"Expected a type declaration, got {type_spec!r}")

        self.package_name = package_name
        self.type_spec = type_spec
        self.file_comment = CodeBlockBuilder()

    def add_file_comment(self, format_: str, *args: Any) -> 'JavaFileBuilder':
        self.file_comment.add(format_, *args)
        return self

    def build(self) -> JavaFile:
        return JavaFile(self)
