"""
Type declarations: classes, interfaces, enums, annotation types and anonymous classes.
"""

from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional

from atmfjstc.lib.py_lang_utils.iteration import iter_with_first, iter_with_last
from atmfjstc.lib.py_lang_utils.unique import check_unique

from atmfjstc.lib.java_codegen.errors import ConstructionError
from atmfjstc.lib.java_codegen.ast.annotations import AnnotationSpec
from atmfjstc.lib.java_codegen.ast.base import Declaration, DeclarationSnapshot, check_valid_name
from atmfjstc.lib.java_codegen.ast.code import CodeBlock, CodeBlockBuilder, EMPTY_CODE
from atmfjstc.lib.java_codegen.ast.members import FieldSpec, MethodSpec
from atmfjstc.lib.java_codegen.ast.modifiers import Modifier, modifier_set, require_exactly_one_of
from atmfjstc.lib.java_codegen.ast.names import OBJECT, TypeName, TypeVariableName


_PUBLIC_STATIC_FINAL = frozenset((Modifier.PUBLIC, Modifier.STATIC, Modifier.FINAL))
_PUBLIC_ABSTRACT = frozenset((Modifier.PUBLIC, Modifier.ABSTRACT))
_PUBLIC_STATIC = frozenset((Modifier.PUBLIC, Modifier.STATIC))
_STATIC = frozenset((Modifier.STATIC,))


class TypeKind(Enum):
    """
    The kinds of type declarations, along with the modifiers that are implied for their members (and are thus not
    printed).
    """
    CLASS = ('class', frozenset(), frozenset(), frozenset(), frozenset())
    INTERFACE = ('interface', _PUBLIC_STATIC_FINAL, _PUBLIC_ABSTRACT, _PUBLIC_STATIC, _STATIC)
    ENUM = ('enum', frozenset(), frozenset(), frozenset(), _STATIC)
    ANNOTATION = ('@interface', _PUBLIC_STATIC_FINAL, _PUBLIC_ABSTRACT, _PUBLIC_STATIC, _STATIC)

    def __init__(self, keyword, implicit_field_modifiers, implicit_method_modifiers, implicit_type_modifiers,
                 as_member_modifiers):
        self.keyword = keyword
        self.implicit_field_modifiers = implicit_field_modifiers
        self.implicit_method_modifiers = implicit_method_modifiers
        self.implicit_type_modifiers = implicit_type_modifiers
        self.as_member_modifiers = as_member_modifiers


def _check_all(type_, items):
    for item in items:
        if not isinstance(item, type_):
            raise TypeError(f"Expected {type_.__name__}, got {item!r}")


class TypeSnapshot(DeclarationSnapshot):
    AST_NODE_CONFIG = (
        ('PARAM', 'kind', dict(type=TypeKind)),
        ('PARAM', 'name', dict(type=str, allow_none=True, check=check_valid_name)),
        ('CHILD', 'anonymous_type_arguments', dict(type=CodeBlock, allow_none=True, default=None)),
        ('CHILD', 'javadoc', dict(type=CodeBlock, default=EMPTY_CODE)),
        ('PARAM', 'annotations', dict(type=tuple, check=lambda v: _check_all(AnnotationSpec, v), default=())),
        ('PARAM', 'modifiers', dict(type=frozenset, default=frozenset())),
        ('CHILD_LIST', 'type_variables', dict(type=TypeVariableName, default=())),
        ('CHILD', 'superclass', dict(type=TypeName, default=OBJECT)),
        ('CHILD_LIST', 'superinterfaces', dict(type=TypeName, default=())),
        ('PARAM', 'enum_constants', dict(type=tuple, default=())),
        ('PARAM', 'fields', dict(type=tuple, check=lambda v: _check_all(FieldSpec, v), default=())),
        ('CHILD', 'static_block', dict(type=CodeBlock, default=EMPTY_CODE)),
        ('CHILD', 'initializer_block', dict(type=CodeBlock, default=EMPTY_CODE)),
        ('PARAM', 'methods', dict(type=tuple, check=lambda v: _check_all(MethodSpec, v), default=())),
        ('PARAM', 'types', dict(type=tuple, default=())),
    )


class TypeSpec(Declaration):
    """
    A type declaration. Use one of the ``*_builder`` static methods to make one.

    The members are always emitted in the same order, regardless of the order in which they were added: enum
    constants, static fields, the static block, instance fields, the initializer block, constructors, methods and
    finally nested types.
    """

    @staticmethod
    def class_builder(name: str) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(TypeKind.CLASS, check_valid_name(name, 'type name'))

    @staticmethod
    def interface_builder(name: str) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(TypeKind.INTERFACE, check_valid_name(name, 'type name'))

    @staticmethod
    def enum_builder(name: str) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(TypeKind.ENUM, check_valid_name(name, 'type name'))

    @staticmethod
    def annotation_builder(name: str) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(TypeKind.ANNOTATION, check_valid_name(name, 'type name'))

    @staticmethod
    def anonymous_class_builder(format_: str = '', *args: Any) -> 'TypeSpecBuilder':
        return TypeSpecBuilder(TypeKind.CLASS, None, CodeBlock.of(format_, *args))

    def _materialize(self, builder):
        _validate_builder(builder)

        return TypeSnapshot(
            builder.kind,
            builder.name,
            anonymous_type_arguments=builder.anonymous_type_arguments,
            javadoc=builder.javadoc.build(),
            annotations=tuple(builder.annotations),
            modifiers=frozenset(builder.modifiers),
            type_variables=tuple(builder.type_variables),
            superclass=builder.superclass,
            superinterfaces=tuple(builder.superinterfaces),
            enum_constants=tuple(builder.enum_constants.items()),
            fields=tuple(builder.fields),
            static_block=builder.static_block.build(),
            initializer_block=builder.initializer_block.build(),
            methods=tuple(builder.methods),
            types=tuple(builder.types),
        )

    def to_builder(self) -> 'TypeSpecBuilder':
        builder = TypeSpecBuilder(self.kind, self.name, self.anonymous_type_arguments)
        builder.javadoc.add_code(self.javadoc)
        builder.annotations.extend(self.annotations)
        builder.modifiers.update(self.modifiers)
        builder.type_variables.extend(self.type_variables)
        builder.superclass = self.superclass
        builder.superinterfaces.extend(self.superinterfaces)
        builder.enum_constants.update(self.enum_constants)
        builder.fields.extend(self.fields)
        builder.static_block.add_code(self.static_block)
        builder.initializer_block.add_code(self.initializer_block)
        builder.methods.extend(self.methods)
        builder.types.extend(self.types)

        return builder

    @property
    def is_anonymous(self) -> bool:
        return self.anonymous_type_arguments is not None

    def has_modifier(self, modifier: Modifier) -> bool:
        return modifier in self.modifiers

    def emit(
        self, code_writer, enum_name: Optional[str] = None, implicit_modifiers: FrozenSet[Modifier] = frozenset()
    ):
        with code_writer.statement_scope():
            if enum_name is not None:
                code_writer.emit_javadoc(self.javadoc)
                code_writer.emit_annotations(self.annotations, False)
                code_writer.emit('%L', enum_name)
                if not self.anonymous_type_arguments.is_empty():
                    code_writer.emit('(')
                    code_writer.emit_code(self.anonymous_type_arguments)
                    code_writer.emit(')')
                if len(self.fields) == 0 and len(self.methods) == 0 and len(self.types) == 0:
                    return
                code_writer.emit(' {\n')
            elif self.is_anonymous:
                supertype = self.superinterfaces[0] if len(self.superinterfaces) > 0 else self.superclass
                code_writer.emit('new %T(', supertype)
                code_writer.emit_code(self.anonymous_type_arguments)
                code_writer.emit(') {\n')
            else:
                self._emit_header(code_writer, implicit_modifiers)

            with code_writer.type_scope(
                None if (enum_name is not None or self.is_anonymous) else self.name,
                (type_spec.name for type_spec in self.types if not type_spec.is_anonymous)
            ), code_writer.indented():
                self._emit_members(code_writer)

            code_writer.emit('}')
            if enum_name is None and not self.is_anonymous:
                code_writer.emit('\n')

    def _emit_header(self, code_writer, implicit_modifiers):
        code_writer.emit_javadoc(self.javadoc)
        code_writer.emit_annotations(self.annotations, False)
        code_writer.emit_modifiers(self.modifiers, implicit_modifiers | self.kind.as_member_modifiers)
        code_writer.emit('%L %L', self.kind.keyword, self.name)
        code_writer.emit_type_variables(self.type_variables)

        if self.kind == TypeKind.INTERFACE:
            extends_types = self.superinterfaces
            implements_types = ()
        else:
            extends_types = () if self.superclass == OBJECT else (self.superclass,)
            implements_types = self.superinterfaces

        for keyword, types in (('extends', extends_types), ('implements', implements_types)):
            if len(types) == 0:
                continue

            code_writer.emit(' ' + keyword)
            for type_name, is_first in iter_with_first(types):
                if not is_first:
                    code_writer.emit(',')
                code_writer.emit(' %T', type_name)

        code_writer.emit(' {\n')

    def _emit_members(self, code_writer):
        has_body_members = len(self.fields) > 0 or len(self.methods) > 0 or len(self.types) > 0
        first_member = True

        def _separate():
            nonlocal first_member
            if not first_member:
                code_writer.emit('\n')
            first_member = False

        for (name, constant), is_last in iter_with_last(self.enum_constants):
            _separate()
            constant.emit(code_writer, name)
            if not is_last:
                code_writer.emit(',\n')
            elif has_body_members:
                code_writer.emit(';\n')
            else:
                code_writer.emit('\n')

        for field in self.fields:
            if field.has_modifier(Modifier.STATIC):
                _separate()
                field.emit(code_writer, self.kind.implicit_field_modifiers)

        if not self.static_block.is_empty():
            _separate()
            code_writer.emit_code(self.static_block)

        for field in self.fields:
            if not field.has_modifier(Modifier.STATIC):
                _separate()
                field.emit(code_writer, self.kind.implicit_field_modifiers)

        if not self.initializer_block.is_empty():
            _separate()
            code_writer.emit_code(self.initializer_block)

        for method in self.methods:
            if method.is_constructor:
                _separate()
                method.emit(code_writer, self.name, self.kind.implicit_method_modifiers)

        for method in self.methods:
            if not method.is_constructor:
                _separate()
                method.emit(code_writer, self.name, self.kind.implicit_method_modifiers)

        for type_spec in self.types:
            _separate()
            type_spec.emit(code_writer, None, self.kind.implicit_type_modifiers)


def _validate_builder(builder):
    kind = builder.kind
    name = builder.name if builder.name is not None else '<anonymous>'

    if kind == TypeKind.ENUM and len(builder.enum_constants) == 0:
        raise ConstructionError(f"At least one enum constant is required for {name}")

    is_abstract = Modifier.ABSTRACT in builder.modifiers or kind != TypeKind.CLASS
    for method in builder.methods:
        if method.has_modifier(Modifier.ABSTRACT) and not is_abstract:
            raise ConstructionError(f"Non-abstract type {name} cannot declare abstract method {method.name}")

    if builder.anonymous_type_arguments is not None:
        supertype_count = (0 if builder.superclass == OBJECT else 1) + len(builder.superinterfaces)
        if supertype_count > 1:
            raise ConstructionError("An anonymous type can have at most one supertype")

    for field in builder.fields:
        if kind in (TypeKind.INTERFACE, TypeKind.ANNOTATION):
            require_exactly_one_of(field.modifiers, Modifier.PUBLIC, Modifier.PRIVATE)
            if not {Modifier.STATIC, Modifier.FINAL}.issubset(field.modifiers):
                raise ConstructionError(f"Field {name}.{field.name} must be static and final")

    for method in builder.methods:
        if kind == TypeKind.INTERFACE:
            require_exactly_one_of(method.modifiers, Modifier.ABSTRACT, Modifier.STATIC, Modifier.DEFAULT)
            require_exactly_one_of(method.modifiers, Modifier.PUBLIC, Modifier.PRIVATE)
        elif kind == TypeKind.ANNOTATION:
            if method.modifiers != kind.implicit_method_modifiers:
                raise ConstructionError(f"Annotation method {name}.{method.name} must be public and abstract")

        if kind != TypeKind.ANNOTATION and method.default_value is not None:
            raise ConstructionError(f"Method {name}.{method.name} cannot have a default value")
        if kind != TypeKind.INTERFACE and method.has_modifier(Modifier.DEFAULT):
            raise ConstructionError(f"Method {name}.{method.name} cannot be default")

    for type_spec in builder.types:
        if not kind.implicit_type_modifiers.issubset(type_spec.modifiers):
            raise ConstructionError(
                "Nested type {}.{} requires modifiers {}".format(
                    name, type_spec.name, sorted(m.keyword for m in kind.implicit_type_modifiers)
                )
            )

    check_unique(
        (type_spec.name for type_spec in builder.types if not type_spec.is_anonymous), item_name='nested type name'
    )


class TypeSpecBuilder:
    kind: TypeKind
    name: Optional[str]
    anonymous_type_arguments: Optional[CodeBlock]
    superclass: TypeName = OBJECT
    superinterfaces: List[TypeName]

    def __init__(self, kind: TypeKind, name: Optional[str], anonymous_type_arguments: Optional[CodeBlock] = None):
        self.kind = kind
        self.name = name
        self.anonymous_type_arguments = anonymous_type_arguments

        self.javadoc = CodeBlockBuilder()
        self.annotations = []
        self.modifiers = set()
        self.type_variables = []
        self.superinterfaces = []
        self.enum_constants = dict()
        self.fields = []
        self.static_block = CodeBlockBuilder()
        self.initializer_block = CodeBlockBuilder()
        self.methods = []
        self.types = []

    def _require_named(self, what):
        if self.anonymous_type_arguments is not None:
            raise ConstructionError(f"Anonymous types cannot have {what}")

    def add_javadoc(self, format_: str, *args: Any) -> 'TypeSpecBuilder':
        self.javadoc.add(format_, *args)
        return self

    def add_javadoc_code(self, block: CodeBlock) -> 'TypeSpecBuilder':
        self.javadoc.add_code(block)
        return self

    def add_annotation(self, annotation: AnnotationSpec) -> 'TypeSpecBuilder':
        self.annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> 'TypeSpecBuilder':
        self._require_named('modifiers')
        self.modifiers.update(modifier_set(modifiers))
        return self

    def add_type_variable(self, type_variable: TypeVariableName) -> 'TypeSpecBuilder':
        self._require_named('type variables')
        self.type_variables.append(type_variable)
        return self

    def set_superclass(self, superclass: TypeName) -> 'TypeSpecBuilder':
        if self.kind != TypeKind.CLASS:
            raise ConstructionError(f"Only classes have superclasses, not {self.kind.keyword} {self.name}")
        if self.superclass != OBJECT:
            raise ConstructionError(f"Superclass was already set to {self.superclass!r}")
        if superclass.is_primitive:
            raise ConstructionError("The superclass cannot be a primitive type")

        self.superclass = superclass
        return self

    def add_superinterface(self, superinterface: TypeName) -> 'TypeSpecBuilder':
        self.superinterfaces.append(superinterface)
        return self

    def add_enum_constant(self, name: str, type_spec: Optional[TypeSpec] = None) -> 'TypeSpecBuilder':
        """
        Adds an enum constant. The optional `type_spec` must be an anonymous type, and provides the constructor
        arguments and the body of the constant, if any.
        """
        if self.kind != TypeKind.ENUM:
            raise ConstructionError(f"{self.name} is not an enum")
        check_valid_name(name, 'enum constant name')

        if type_spec is None:
            type_spec = TypeSpec.anonymous_class_builder().build()
        elif not type_spec.is_anonymous:
            raise ConstructionError(f"Enum constant {name} must be an anonymous type")

        self.enum_constants[name] = type_spec
        return self

    def add_field(self, field: FieldSpec) -> 'TypeSpecBuilder':
        self.fields.append(field)
        return self

    def add_fields(self, fields: Iterable[FieldSpec]) -> 'TypeSpecBuilder':
        for field in fields:
            self.add_field(field)
        return self

    def add_static_block(self, block: CodeBlock) -> 'TypeSpecBuilder':
        self.static_block.begin_control_flow('static').add_code(block).end_control_flow()
        return self

    def add_initializer_block(self, block: CodeBlock) -> 'TypeSpecBuilder':
        if self.kind not in (TypeKind.CLASS, TypeKind.ENUM):
            raise ConstructionError(f"A {self.kind.keyword} cannot have initializer blocks")

        self.initializer_block.add('{\n').indent().add_code(block).unindent().add('}\n')
        return self

    def add_method(self, method: MethodSpec) -> 'TypeSpecBuilder':
        self.methods.append(method)
        return self

    def add_methods(self, methods: Iterable[MethodSpec]) -> 'TypeSpecBuilder':
        for method in methods:
            self.add_method(method)
        return self

    def add_type(self, type_spec: TypeSpec) -> 'TypeSpecBuilder':
        self.types.append(type_spec)
        return self

    def build(self) -> TypeSpec:
        return TypeSpec(self)
