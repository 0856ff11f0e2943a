"""
Entry points for rendering declaration trees to text.

Rendering a file is done in two passes (see `resolution` for the details): `collect_bindings` walks the whole tree to
decide which names will be imported, then `emit` writes the text using those decisions. `render` does both.
"""

import logging

from io import StringIO
from typing import Optional, TextIO, Union

from atmfjstc.lib.java_codegen.CodegenContext import CodegenContext
from atmfjstc.lib.java_codegen.CodeWriter import CodeWriter
from atmfjstc.lib.java_codegen.resolution import BindingTable, SymbolResolver
from atmfjstc.lib.java_codegen.ast.base import Declaration
from atmfjstc.lib.java_codegen.ast.code import CodeBlock
from atmfjstc.lib.java_codegen.ast.files import JavaFile
from atmfjstc.lib.java_codegen.ast.names import TypeName
from atmfjstc.lib.java_codegen.ast.types import TypeSpec


LOG = logging.getLogger(__name__)


RenderRoot = Union[JavaFile, TypeSpec]


class _NullSink:
    def write(self, text: str) -> int:
        return len(text)


def _as_file(root: RenderRoot) -> JavaFile:
    if isinstance(root, JavaFile):
        return root
    if isinstance(root, TypeSpec):
        return JavaFile.builder('', root).build()

    raise TypeError(f"Can only render files and type declarations, got {root!r}")


def collect_bindings(root: RenderRoot, context: Optional[CodegenContext] = None) -> BindingTable:
    """
    Runs the collection pass over a file, returning the simple names that will be bound (imported) in it.
    """
    context = context or CodegenContext()
    root = _as_file(root)

    resolver = SymbolResolver(
        root.package_name, collecting=True, trace=context.trace, declared_names=[root.type_spec.name]
    )
    writer = CodeWriter(_NullSink(), context, resolver)
    root.emit(writer)
    writer.close()

    return resolver.binding_table()


def emit(root: RenderRoot, sink: TextIO, bindings: BindingTable, context: Optional[CodegenContext] = None):
    """
    Runs the emission pass over a file, writing the text to `sink`. Names are spelled according to `bindings`, which
    should normally be the result of `collect_bindings` for the same file.

    Any error raised by the sink propagates unchanged.
    """
    context = context or CodegenContext()
    root = _as_file(root)

    resolver = SymbolResolver(
        root.package_name, bindings=bindings, trace=context.trace, declared_names=[root.type_spec.name]
    )
    writer = CodeWriter(sink, context, resolver)
    root.emit(writer)
    writer.close()

    assert writer.indent_level == 0, f"Unbalanced indentation after rendering {root.artifact_name}"


def render(root: RenderRoot, sink: TextIO, context: Optional[CodegenContext] = None) -> str:
    """
    Renders a file (or a type, which is then placed in the default package) to a sink.

    Returns:
        The artifact name of the rendered file, i.e. the canonical name of its type.
    """
    context = context or CodegenContext()
    root = _as_file(root)
    artifact_name = root.artifact_name

    LOG.debug("Rendering %s", artifact_name)

    bindings = collect_bindings(root, context)
    emit(root, sink, bindings, context)

    LOG.debug("Rendered %s (%d imports)", artifact_name, len(bindings.imports_for(root.package_name)))

    return artifact_name


def render_to_str(
    root: Union[RenderRoot, Declaration, TypeName, CodeBlock], context: Optional[CodegenContext] = None
) -> str:
    """
    Renders any declaration, type reference or code block to a string.

    Files and types go through both passes, just like in `render`. Other fragments are emitted on their own, with no
    enclosing scope and no bindings, so all the names inside them are spelled fully qualified.
    """
    context = context or CodegenContext()
    buffer = StringIO()

    if isinstance(root, JavaFile) or (isinstance(root, TypeSpec) and not root.is_anonymous):
        render(root, buffer, context)
        return buffer.getvalue()

    writer = CodeWriter(buffer, context, SymbolResolver(trace=context.trace))
    if isinstance(root, CodeBlock):
        writer.emit_code(root)
    elif isinstance(root, (Declaration, TypeName)):
        root.emit(writer)
    else:
        raise TypeError(f"Cannot render {root!r}")
    writer.close()

    return buffer.getvalue()
