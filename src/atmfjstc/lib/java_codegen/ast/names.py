"""
Nodes that refer to types: primitive types, qualified names of classes, type variables, arrays and parameterized types.

Of these, only the `QualifiedName` is subject to name resolution, i.e. the renderer decides for each occurrence whether
it can be printed as a simple name (thanks to an import or an enclosing declaration) or whether it must be qualified.
"""

from abc import abstractmethod
from typing import Optional, Tuple

from atmfjstc.lib.text_utils import check_nonempty_str

from atmfjstc.lib.java_codegen.ast.base import JavaCodegenASTNode, check_valid_name


class TypeName(JavaCodegenASTNode):
    """
    Base class for all type references.
    """
    AST_NODE_CONFIG = ('abstract',)

    @property
    def is_primitive(self) -> bool:
        return False

    @abstractmethod
    def emit(self, code_writer):
        """Writes the spelling of this type to a `CodeWriter`"""
        raise NotImplementedError


PRIMITIVE_KEYWORDS = ('void', 'boolean', 'byte', 'short', 'int', 'long', 'char', 'float', 'double')


def _check_primitive_keyword(keyword):
    if keyword not in PRIMITIVE_KEYWORDS:
        raise ValueError(f"Not a primitive type: {keyword!r}")


class PrimitiveTypeName(TypeName):
    AST_NODE_CONFIG = (
        ('PARAM', 'keyword', dict(type=str, check=_check_primitive_keyword)),
    )

    @property
    def is_primitive(self):
        return self.keyword != 'void'

    def emit(self, code_writer):
        code_writer.emit_and_indent(self.keyword)


VOID = PrimitiveTypeName('void')
BOOLEAN = PrimitiveTypeName('boolean')
BYTE = PrimitiveTypeName('byte')
SHORT = PrimitiveTypeName('short')
INT = PrimitiveTypeName('int')
LONG = PrimitiveTypeName('long')
CHAR = PrimitiveTypeName('char')
FLOAT = PrimitiveTypeName('float')
DOUBLE = PrimitiveTypeName('double')


def _check_name_segments(names):
    if len(names) < 2:
        raise ValueError("A qualified name needs a package segment and at least one simple name")

    for index, name in enumerate(names):
        if not isinstance(name, str):
            raise TypeError(f"Segment #{index} is not a string")
        if index > 0:
            check_valid_name(name, 'simple name')


class QualifiedName(TypeName):
    """
    A fully qualified name for a top-level or nested class.

    The names are stored from outermost to innermost. The first segment is the package (which can be empty, meaning
    the default package) and the rest are simple names, e.g. ``('java.util', 'Map', 'Entry')`` for ``Map.Entry``.
    """
    AST_NODE_CONFIG = (
        ('PARAM', 'names', dict(type=tuple, check=_check_name_segments)),
    )

    @staticmethod
    def of(package_name: str, simple_name: str, *simple_names: str) -> 'QualifiedName':
        """
        Returns a name created from the given parts. For example, calling this with package name ``"java.util"`` and
        simple names ``"Map"``, ``"Entry"`` yields the name for ``java.util.Map.Entry``.
        """
        return QualifiedName((package_name, simple_name) + simple_names)

    @staticmethod
    def best_guess(text: str) -> 'QualifiedName':
        """
        Returns a name for the given fully-qualified class name string. This assumes that the input follows the usual
        style (lowercase package names, UpperCamelCase class names) and will fail with a `ValueError` otherwise.
        """
        check_nonempty_str(text, 'class name')

        parts = text.split('.')

        n_package_parts = 0
        while n_package_parts < len(parts) and parts[n_package_parts][:1].islower():
            n_package_parts += 1

        simple_names = parts[n_package_parts:]

        if len(simple_names) == 0 or not all(name[:1].isupper() for name in simple_names):
            raise ValueError(f"Couldn't make a guess for {text!r}")

        return QualifiedName(('.'.join(parts[:n_package_parts]),) + tuple(simple_names))

    @property
    def package_name(self) -> str:
        return self.names[0]

    @property
    def simple_names(self) -> Tuple[str, ...]:
        return self.names[1:]

    @property
    def simple_name(self) -> str:
        return self.names[-1]

    @property
    def canonical_name(self) -> str:
        return '.'.join(self.names if self.package_name != '' else self.simple_names)

    @property
    def reflection_name(self) -> str:
        """The name as used by the runtime, e.g. ``java.util.Map$Entry``"""
        top_level = self.top_level_name().canonical_name

        return '$'.join((top_level,) + self.simple_names[1:])

    def enclosing_name(self) -> Optional['QualifiedName']:
        """Returns the name of the enclosing class, or None if this is a top-level class"""
        if len(self.names) == 2:
            return None

        return QualifiedName(self.names[:-1])

    def top_level_name(self) -> 'QualifiedName':
        return QualifiedName(self.names[:2])

    def nested(self, name: str) -> 'QualifiedName':
        """Returns the name of a class nested inside this one"""
        return QualifiedName(self.names + (name,))

    def peer(self, name: str) -> 'QualifiedName':
        """Returns the name of a class that shares the same enclosing package or class"""
        return QualifiedName(self.names[:-1] + (name,))

    def __lt__(self, other):
        if not isinstance(other, QualifiedName):
            return NotImplemented

        return self.canonical_name < other.canonical_name

    def emit(self, code_writer):
        code_writer.emit_and_indent(code_writer.lookup_name(self))


OBJECT = QualifiedName.of('java.lang', 'Object')
STRING = QualifiedName.of('java.lang', 'String')


class TypeVariableName(TypeName):
    AST_NODE_CONFIG = (
        ('PARAM', 'name', dict(type=str, check=check_valid_name)),
        ('CHILD_LIST', 'bounds', dict(type=TypeName, default=())),
    )

    def emit(self, code_writer):
        code_writer.emit_and_indent(self.name)


def _check_not_void(type_name):
    if type_name == VOID:
        raise ValueError("'void' cannot be used here")


class ArrayTypeName(TypeName):
    AST_NODE_CONFIG = (
        ('CHILD', 'component', dict(type=TypeName, check=_check_not_void)),
    )

    def emit(self, code_writer, varargs: bool = False):
        self.component.emit(code_writer)
        code_writer.emit_and_indent('...' if varargs else '[]')


class ParameterizedTypeName(TypeName):
    """
    A generic class with its actual type arguments, e.g. ``List<String>``.
    """
    AST_NODE_CONFIG = (
        ('CHILD', 'raw', dict(type=QualifiedName)),
        ('CHILD_LIST', 'type_arguments', dict(type=TypeName)),
    )

    def _sanity_check_post_init(self):
        if len(self.type_arguments) == 0:
            raise ValueError(f"No type arguments given for {self.raw.canonical_name}")
        for argument in self.type_arguments:
            if argument.is_primitive or argument == VOID:
                raise ValueError(f"Invalid type argument: {argument!r}")

    def emit(self, code_writer):
        self.raw.emit(code_writer)
        code_writer.emit_and_indent('<')

        for index, argument in enumerate(self.type_arguments):
            if index > 0:
                code_writer.emit_and_indent(', ')
            argument.emit(code_writer)

        code_writer.emit_and_indent('>')


def parameterized(raw: QualifiedName, *type_arguments: TypeName) -> ParameterizedTypeName:
    """Convenience function for instantiating a ParameterizedTypeName"""
    return ParameterizedTypeName(raw, type_arguments)


def array_of(component: TypeName) -> ArrayTypeName:
    """Convenience function for instantiating an ArrayTypeName"""
    return ArrayTypeName(component)
