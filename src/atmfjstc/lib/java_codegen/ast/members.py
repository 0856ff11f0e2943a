"""
Declarations for the members of a type: fields, methods (including constructors) and method parameters.
"""

from typing import Any, Iterable, List, Mapping, Optional

from atmfjstc.lib.py_lang_utils.iteration import iter_with_first, iter_with_first_last
from atmfjstc.lib.py_lang_utils.unique import check_unique

from atmfjstc.lib.java_codegen.errors import ConstructionError
from atmfjstc.lib.java_codegen.ast.annotations import AnnotationSpec
from atmfjstc.lib.java_codegen.ast.base import Declaration, DeclarationSnapshot, check_valid_name
from atmfjstc.lib.java_codegen.ast.code import CodeBlock, CodeBlockBuilder, EMPTY_CODE
from atmfjstc.lib.java_codegen.ast.modifiers import Modifier, modifier_set
from atmfjstc.lib.java_codegen.ast.names import ArrayTypeName, TypeName, TypeVariableName, VOID


def _check_annotations(annotations):
    for annotation in annotations:
        if not isinstance(annotation, AnnotationSpec):
            raise TypeError(f"Not an annotation: {annotation!r}")


class ParameterSnapshot(DeclarationSnapshot):
    AST_NODE_CONFIG = (
        ('CHILD', 'type', dict(type=TypeName)),
        ('PARAM', 'name', dict(type=str, check=check_valid_name)),
        ('PARAM', 'annotations', dict(type=tuple, check=_check_annotations, default=())),
        ('PARAM', 'modifiers', dict(type=frozenset, default=frozenset())),
        ('CHILD', 'javadoc', dict(type=CodeBlock, default=EMPTY_CODE)),
    )


class ParameterSpec(Declaration):
    """A method or constructor parameter."""

    @staticmethod
    def builder(type_: TypeName, name: str, *modifiers: Modifier) -> 'ParameterSpecBuilder':
        return ParameterSpecBuilder(type_, name).add_modifiers(*modifiers)

    @staticmethod
    def of(type_: TypeName, name: str, *modifiers: Modifier) -> 'ParameterSpec':
        return ParameterSpec.builder(type_, name, *modifiers).build()

    def _materialize(self, builder):
        return ParameterSnapshot(
            builder.type, builder.name, tuple(builder.annotations), frozenset(builder.modifiers),
            javadoc=builder.javadoc.build(),
        )

    def to_builder(self) -> 'ParameterSpecBuilder':
        builder = ParameterSpecBuilder(self.type, self.name)
        builder.javadoc.add_code(self.javadoc)
        builder.annotations.extend(self.annotations)
        builder.modifiers.update(self.modifiers)

        return builder

    def emit(self, code_writer, varargs: bool = False):
        code_writer.emit_annotations(self.annotations, True)
        code_writer.emit_modifiers(self.modifiers)

        if varargs:
            self.type.emit(code_writer, varargs=True)
        else:
            self.type.emit(code_writer)

        code_writer.emit(' %N', self.name)


class ParameterSpecBuilder:
    def __init__(self, type_: TypeName, name: str):
        check_valid_name(name, 'parameter name')

        self.type = type_
        self.name = name
        self.javadoc = CodeBlockBuilder()
        self.annotations = []
        self.modifiers = set()

    def add_javadoc(self, format_: str, *args: Any) -> 'ParameterSpecBuilder':
        """Adds documentation for the parameter, emitted as a ``@param`` tag in the doc comment of its method"""
        self.javadoc.add(format_, *args)
        return self

    def add_javadoc_code(self, block: CodeBlock) -> 'ParameterSpecBuilder':
        self.javadoc.add_code(block)
        return self

    def add_annotation(self, annotation: AnnotationSpec) -> 'ParameterSpecBuilder':
        self.annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> 'ParameterSpecBuilder':
        for modifier in modifier_set(modifiers):
            if modifier != Modifier.FINAL:
                raise ConstructionError(f"Unexpected parameter modifier: {modifier.keyword}")
            self.modifiers.add(modifier)

        return self

    def build(self) -> ParameterSpec:
        return ParameterSpec(self)


class FieldSnapshot(DeclarationSnapshot):
    AST_NODE_CONFIG = (
        ('CHILD', 'type', dict(type=TypeName)),
        ('PARAM', 'name', dict(type=str, check=check_valid_name)),
        ('CHILD', 'javadoc', dict(type=CodeBlock, default=EMPTY_CODE)),
        ('PARAM', 'annotations', dict(type=tuple, check=_check_annotations, default=())),
        ('PARAM', 'modifiers', dict(type=frozenset, default=frozenset())),
        ('CHILD', 'initializer', dict(type=CodeBlock, default=EMPTY_CODE)),
    )


class FieldSpec(Declaration):
    """A field declaration, with an optional initializer."""

    @staticmethod
    def builder(type_: TypeName, name: str, *modifiers: Modifier) -> 'FieldSpecBuilder':
        return FieldSpecBuilder(type_, name).add_modifiers(*modifiers)

    @staticmethod
    def of(type_: TypeName, name: str, *modifiers: Modifier) -> 'FieldSpec':
        return FieldSpec.builder(type_, name, *modifiers).build()

    def _materialize(self, builder):
        if builder.type == VOID:
            raise ConstructionError(f"Field {builder.name} cannot be of type void")

        return FieldSnapshot(
            builder.type, builder.name,
            javadoc=builder.javadoc.build(),
            annotations=tuple(builder.annotations),
            modifiers=frozenset(builder.modifiers),
            initializer=builder.initializer_block if builder.initializer_block is not None else EMPTY_CODE,
        )

    def to_builder(self) -> 'FieldSpecBuilder':
        builder = FieldSpecBuilder(self.type, self.name)
        builder.javadoc.add_code(self.javadoc)
        builder.annotations.extend(self.annotations)
        builder.modifiers.update(self.modifiers)
        if not self.initializer.is_empty():
            builder.initializer_block = self.initializer

        return builder

    def has_modifier(self, modifier: Modifier) -> bool:
        return modifier in self.modifiers

    def emit(self, code_writer, implicit_modifiers=frozenset()):
        code_writer.emit_javadoc(self.javadoc)
        code_writer.emit_annotations(self.annotations, False)
        code_writer.emit_modifiers(self.modifiers, implicit_modifiers)
        code_writer.emit('%T %N', self.type, self.name)

        if not self.initializer.is_empty():
            code_writer.emit(' = ')
            code_writer.emit_code(self.initializer)

        code_writer.emit(';\n')


class FieldSpecBuilder:
    def __init__(self, type_: TypeName, name: str):
        check_valid_name(name, 'field name')

        self.type = type_
        self.name = name
        self.javadoc = CodeBlockBuilder()
        self.annotations = []
        self.modifiers = set()
        self.initializer_block = None

    def add_javadoc(self, format_: str, *args: Any) -> 'FieldSpecBuilder':
        self.javadoc.add(format_, *args)
        return self

    def add_javadoc_code(self, block: CodeBlock) -> 'FieldSpecBuilder':
        self.javadoc.add_code(block)
        return self

    def add_annotation(self, annotation: AnnotationSpec) -> 'FieldSpecBuilder':
        self.annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> 'FieldSpecBuilder':
        self.modifiers.update(modifier_set(modifiers))
        return self

    def initializer_code(self, code: CodeBlock) -> 'FieldSpecBuilder':
        if self.initializer_block is not None:
            raise ConstructionError(f"Initializer was already set for field {self.name}")

        self.initializer_block = code
        return self

    def initializer(self, format_: str, *args: Any) -> 'FieldSpecBuilder':
        return self.initializer_code(CodeBlock.of(format_, *args))

    def build(self) -> FieldSpec:
        return FieldSpec(self)


CONSTRUCTOR = '<init>'


def _check_method_name(name):
    if name != CONSTRUCTOR:
        check_valid_name(name, 'method name')


class MethodSnapshot(DeclarationSnapshot):
    AST_NODE_CONFIG = (
        ('PARAM', 'name', dict(type=str, check=_check_method_name)),
        ('CHILD', 'javadoc', dict(type=CodeBlock, default=EMPTY_CODE)),
        ('PARAM', 'annotations', dict(type=tuple, check=_check_annotations, default=())),
        ('PARAM', 'modifiers', dict(type=frozenset, default=frozenset())),
        ('CHILD_LIST', 'type_variables', dict(type=TypeVariableName, default=())),
        ('CHILD', 'return_type', dict(type=TypeName, allow_none=True, default=None)),
        ('PARAM', 'parameters', dict(type=tuple, default=())),
        ('PARAM', 'varargs', dict(type=bool, default=False)),
        ('CHILD_LIST', 'exceptions', dict(type=TypeName, default=())),
        ('CHILD', 'code', dict(type=CodeBlock, default=EMPTY_CODE)),
        ('CHILD', 'default_value', dict(type=CodeBlock, allow_none=True, default=None)),
    )


class MethodSpec(Declaration):
    """A method or constructor declaration."""

    @staticmethod
    def method_builder(name: str) -> 'MethodSpecBuilder':
        return MethodSpecBuilder(name)

    @staticmethod
    def constructor_builder() -> 'MethodSpecBuilder':
        return MethodSpecBuilder(CONSTRUCTOR)

    def _materialize(self, builder):
        is_constructor = builder.name == CONSTRUCTOR
        parameters = tuple(builder.parameters)

        if is_constructor and builder.return_type is not None:
            raise ConstructionError("A constructor cannot have a return type")

        if builder.varargs:
            if len(parameters) == 0 or not isinstance(parameters[-1].type, ArrayTypeName):
                raise ConstructionError(f"Last parameter of varargs method {builder.name} must be an array")

        check_unique((parameter.name for parameter in parameters), item_name='parameter name')

        code = builder.code.build()
        if Modifier.ABSTRACT in builder.modifiers and not code.is_empty():
            raise ConstructionError(f"Abstract method {builder.name} cannot have code")

        return MethodSnapshot(
            builder.name,
            javadoc=builder.javadoc.build(),
            annotations=tuple(builder.annotations),
            modifiers=frozenset(builder.modifiers),
            type_variables=tuple(builder.type_variables),
            return_type=(None if is_constructor else (builder.return_type or VOID)),
            parameters=parameters,
            varargs=builder.varargs,
            exceptions=tuple(builder.exceptions),
            code=code,
            default_value=builder.default_value,
        )

    def to_builder(self) -> 'MethodSpecBuilder':
        builder = MethodSpecBuilder(self.name)
        builder.javadoc.add_code(self.javadoc)
        builder.annotations.extend(self.annotations)
        builder.modifiers.update(self.modifiers)
        builder.type_variables.extend(self.type_variables)
        builder.return_type = self.return_type
        builder.parameters.extend(self.parameters)
        builder.varargs = self.varargs
        builder.exceptions.extend(self.exceptions)
        builder.code.add_code(self.code)
        builder.default_value = self.default_value

        return builder

    @property
    def is_constructor(self) -> bool:
        return self.name == CONSTRUCTOR

    def has_modifier(self, modifier: Modifier) -> bool:
        return modifier in self.modifiers

    def _javadoc_with_parameters(self) -> CodeBlock:
        documented = [parameter for parameter in self.parameters if not parameter.javadoc.is_empty()]
        if len(documented) == 0:
            return self.javadoc

        builder = self.javadoc.to_builder()
        if not self.javadoc.is_empty():
            builder.add('\n')
        for parameter in documented:
            builder.add('@param %L %L', parameter.name, parameter.javadoc)

        return builder.build()

    def emit(self, code_writer, enclosing_name: Optional[str] = None, implicit_modifiers=frozenset()):
        code_writer.emit_javadoc(self._javadoc_with_parameters())
        code_writer.emit_annotations(self.annotations, False)
        code_writer.emit_modifiers(self.modifiers, implicit_modifiers)

        if len(self.type_variables) > 0:
            code_writer.emit_type_variables(self.type_variables)
            code_writer.emit(' ')

        if self.is_constructor:
            code_writer.emit('%L(', enclosing_name or 'Constructor')
        else:
            code_writer.emit('%T %L(', self.return_type, self.name)

        for parameter, is_first, is_last in iter_with_first_last(self.parameters):
            if not is_first:
                code_writer.emit(',').emit_wrapping_space()
            parameter.emit(code_writer, is_last and self.varargs)

        code_writer.emit(')')

        if self.default_value is not None and not self.default_value.is_empty():
            code_writer.emit(' default ')
            code_writer.emit_code(self.default_value)

        if len(self.exceptions) > 0:
            code_writer.emit_wrapping_space().emit('throws')
            for exception, is_first in iter_with_first(self.exceptions):
                if not is_first:
                    code_writer.emit(',')
                code_writer.emit_wrapping_space().emit('%T', exception)

        if self.has_modifier(Modifier.ABSTRACT):
            code_writer.emit(';\n')
        elif self.has_modifier(Modifier.NATIVE):
            code_writer.emit_code(self.code)
            code_writer.emit(';\n')
        else:
            code_writer.emit(' {\n')
            with code_writer.indented():
                code_writer.emit_code(self.code)
            code_writer.emit('}\n')


class MethodSpecBuilder:
    name: str
    code: CodeBlockBuilder
    parameters: List[ParameterSpec]
    return_type: Optional[TypeName] = None
    default_value: Optional[CodeBlock] = None
    varargs: bool = False

    def __init__(self, name: str):
        _check_method_name(name)

        self.name = name
        self.javadoc = CodeBlockBuilder()
        self.annotations = []
        self.modifiers = set()
        self.type_variables = []
        self.parameters = []
        self.exceptions = []
        self.code = CodeBlockBuilder()

    def add_javadoc(self, format_: str, *args: Any) -> 'MethodSpecBuilder':
        self.javadoc.add(format_, *args)
        return self

    def add_javadoc_code(self, block: CodeBlock) -> 'MethodSpecBuilder':
        self.javadoc.add_code(block)
        return self

    def add_annotation(self, annotation: AnnotationSpec) -> 'MethodSpecBuilder':
        self.annotations.append(annotation)
        return self

    def add_modifiers(self, *modifiers: Modifier) -> 'MethodSpecBuilder':
        self.modifiers.update(modifier_set(modifiers))
        return self

    def add_type_variable(self, type_variable: TypeVariableName) -> 'MethodSpecBuilder':
        self.type_variables.append(type_variable)
        return self

    def returns(self, return_type: TypeName) -> 'MethodSpecBuilder':
        if self.name == CONSTRUCTOR:
            raise ConstructionError("A constructor cannot have a return type")

        self.return_type = return_type
        return self

    def add_parameter_spec(self, parameter: ParameterSpec) -> 'MethodSpecBuilder':
        self.parameters.append(parameter)
        return self

    def add_parameter(self, type_: TypeName, name: str, *modifiers: Modifier) -> 'MethodSpecBuilder':
        return self.add_parameter_spec(ParameterSpec.of(type_, name, *modifiers))

    def add_parameters(self, parameters: Iterable[ParameterSpec]) -> 'MethodSpecBuilder':
        for parameter in parameters:
            self.add_parameter_spec(parameter)
        return self

    def set_varargs(self, varargs: bool = True) -> 'MethodSpecBuilder':
        self.varargs = varargs
        return self

    def add_exception(self, exception: TypeName) -> 'MethodSpecBuilder':
        self.exceptions.append(exception)
        return self

    def add_code(self, format_: str, *args: Any) -> 'MethodSpecBuilder':
        self.code.add(format_, *args)
        return self

    def add_named_code(self, format_: str, args: Mapping[str, Any]) -> 'MethodSpecBuilder':
        self.code.add_named(format_, args)
        return self

    def add_code_block(self, block: CodeBlock) -> 'MethodSpecBuilder':
        self.code.add_code(block)
        return self

    def add_comment(self, format_: str, *args: Any) -> 'MethodSpecBuilder':
        self.code.add_comment(format_, *args)
        return self

    def add_statement(self, format_: str, *args: Any) -> 'MethodSpecBuilder':
        self.code.add_statement(format_, *args)
        return self

    def begin_control_flow(self, control_flow: str, *args: Any) -> 'MethodSpecBuilder':
        self.code.begin_control_flow(control_flow, *args)
        return self

    def next_control_flow(self, control_flow: str, *args: Any) -> 'MethodSpecBuilder':
        self.code.next_control_flow(control_flow, *args)
        return self

    def end_control_flow(self, control_flow: Optional[str] = None, *args: Any) -> 'MethodSpecBuilder':
        self.code.end_control_flow(control_flow, *args)
        return self

    def default_value_code(self, value: CodeBlock) -> 'MethodSpecBuilder':
        if self.default_value is not None:
            raise ConstructionError(f"Default value was already set for method {self.name}")

        self.default_value = value
        return self

    def default_value_format(self, format_: str, *args: Any) -> 'MethodSpecBuilder':
        return self.default_value_code(CodeBlock.of(format_, *args))

    def build(self) -> MethodSpec:
        return MethodSpec(self)
