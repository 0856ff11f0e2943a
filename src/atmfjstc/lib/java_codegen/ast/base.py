import re

from abc import abstractmethod

from atmfjstc.lib.ast import ASTNode

from atmfjstc.lib.java_codegen.errors import ConstructionError
from atmfjstc.lib.java_codegen.lazy import LazyNode


class JavaCodegenASTNode(ASTNode):
    """
    Base class for all the immutable nodes used in the declaration model (names, code blocks, declaration snapshots).
    """
    AST_NODE_CONFIG = ('abstract',)


class DeclarationSnapshot(JavaCodegenASTNode):
    """
    Base class for the frozen contents of a lazily-initialized declaration (see `lazy.LazyNode`).
    """
    AST_NODE_CONFIG = ('abstract',)


RESERVED_WORDS = frozenset((
    'abstract', 'assert', 'boolean', 'break', 'byte', 'case', 'catch', 'char', 'class', 'const', 'continue', 'default',
    'do', 'double', 'else', 'enum', 'extends', 'final', 'finally', 'float', 'for', 'goto', 'if', 'implements',
    'import', 'instanceof', 'int', 'interface', 'long', 'native', 'new', 'package', 'private', 'protected', 'public',
    'return', 'short', 'static', 'strictfp', 'super', 'switch', 'synchronized', 'this', 'throw', 'throws', 'transient',
    'try', 'void', 'volatile', 'while', 'true', 'false', 'null',
))

_IDENTIFIER_RE = re.compile(r'[A-Za-z_$][A-Za-z0-9_$]*')


def is_valid_name(name: str) -> bool:
    """Checks whether a string can be used as an identifier (i.e. has the right form and is not a reserved word)"""
    return (_IDENTIFIER_RE.fullmatch(name) is not None) and (name not in RESERVED_WORDS)


def check_valid_name(name: str, value_name: str = 'name') -> str:
    """Checks that a string is a valid identifier and returns it, otherwise throws a `ConstructionError`"""
    if not is_valid_name(name):
        raise ConstructionError(f"Not a valid {value_name}: {name!r}")

    return name


class Declaration(LazyNode):
    """
    Base class for declarations (types, fields, methods, parameters, annotations, files). These are lazily populated
    from their builders (see `lazy.LazyNode`) and know how to emit themselves to a `CodeWriter`.
    """

    @abstractmethod
    def emit(self, code_writer, *args, **kwargs):
        raise NotImplementedError

    def emit_as_literal(self, code_writer):
        """Emits this declaration as the value of a ``%L`` placeholder"""
        self.emit(code_writer)
