import unittest

from atmfjstc.lib.java_codegen.CodegenContext import CodegenContext
from atmfjstc.lib.java_codegen.errors import ConstructionError
from atmfjstc.lib.java_codegen.ast.code import CodeBlock, string_literal
from atmfjstc.lib.java_codegen.ast.members import FieldSpec
from atmfjstc.lib.java_codegen.ast.names import QualifiedName, INT
from atmfjstc.lib.java_codegen.render import render_to_str


LIST = QualifiedName.of('java.util', 'List')


class CodeBlockConstructionTest(unittest.TestCase):
    def test_relative_args(self):
        block = CodeBlock.of('%L + %L', 1, 2)

        self.assertEqual(block.format_parts, ('%L', ' + ', '%L'))
        self.assertEqual(block.args, (1, 2))

    def test_indexed_args(self):
        self.assertEqual(render_to_str(CodeBlock.of('%2L %1L %2L', 'a', 'b')), 'b a b')

    def test_too_few_args(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%L %L', 1)

    def test_too_many_args(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%L', 1, 2)

    def test_unused_indexed_arg(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%1L', 1, 2)

    def test_indexed_arg_out_of_range(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%3L', 1, 2)

    def test_mixed_args(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%1L %L', 1, 2)

    def test_invalid_placeholder(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%X')

    def test_dangling_percent(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('100%')

    def test_indexed_no_arg_placeholder(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%1>')

    def test_type_placeholder_needs_type(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%T', 'java.util.List')

    def test_name_placeholder(self):
        self.assertEqual(render_to_str(CodeBlock.of('%N = 0', FieldSpec.of(INT, 'count'))), 'count = 0')

        with self.assertRaises(ConstructionError):
            CodeBlock.of('%N', 3)

    def test_unbalanced_indent(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%>foo')

    def test_unindent_without_indent(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('foo%<')

    def test_unbalanced_statement(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%[foo')
        with self.assertRaises(ConstructionError):
            CodeBlock.of('foo%]')
        with self.assertRaises(ConstructionError):
            CodeBlock.of('%[%[foo%]%]')

    def test_failed_add_leaves_builder_unchanged(self):
        builder = CodeBlock.builder().add('a;\n')

        with self.assertRaises(ConstructionError):
            builder.add('%<')

        self.assertEqual(builder.build(), CodeBlock.of('a;\n'))

    def test_equality(self):
        self.assertEqual(CodeBlock.of('%L + %T', 1, LIST), CodeBlock.of('%L + %T', 1, LIST))
        self.assertEqual(hash(CodeBlock.of('%L + %T', 1, LIST)), hash(CodeBlock.of('%L + %T', 1, LIST)))
        self.assertNotEqual(CodeBlock.of('%L', 1), CodeBlock.of('%L', 2))

    def test_empty(self):
        self.assertTrue(CodeBlock.of('').is_empty())
        self.assertFalse(CodeBlock.of(' ').is_empty())

    def test_join(self):
        joined = CodeBlock.join([CodeBlock.of('%L', 1), CodeBlock.of('%S', 'two'), CodeBlock.of('three')], ', ')

        self.assertEqual(render_to_str(joined), '1, "two", three')

    def test_to_builder(self):
        block = CodeBlock.of('a = %L;\n', 1).to_builder().add('b = %L;\n', 2).build()

        self.assertEqual(render_to_str(block), 'a = 1;\nb = 2;\n')

    def test_invalid_parts_given_directly(self):
        with self.assertRaises(ValueError) as cm:
            CodeBlock(('%Q',))

        self.assertIsInstance(cm.exception.__cause__, ConstructionError)


class NamedArgsTest(unittest.TestCase):
    def test_named_args(self):
        block = CodeBlock.builder().add_named('%count:L items of %type:T, 100%%', dict(count=3, type=LIST)).build()

        self.assertEqual(block.args, (3, LIST))
        self.assertEqual(render_to_str(block), '3 items of java.util.List, 100%')

    def test_repeated_and_unused_args(self):
        block = CodeBlock.builder().add_named('%x:N = %x:N + %step:L', dict(x='total', step=1, unused=2)).build()

        self.assertEqual(render_to_str(block), 'total = total + 1')

    def test_missing_arg(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.builder().add_named('%count:L', dict())

    def test_arg_names_start_lowercase(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.builder().add_named('%Count:L', dict(Count=1))

    def test_invalid_placeholders(self):
        for format_ in ('%count:Q', '%1L', '%count', '%'):
            with self.assertRaises(ConstructionError):
                CodeBlock.builder().add_named(format_, dict(count=1))


class ControlFlowTest(unittest.TestCase):
    def test_if(self):
        block = (
            CodeBlock.builder()
            .begin_control_flow('if (%N)', 'x')
            .add_statement('foo()')
            .end_control_flow()
            .add_statement('bar()')
            .build()
        )

        self.assertEqual(render_to_str(block), 'if (x) {\n  foo();\n}\nbar();\n')

    def test_if_else(self):
        block = (
            CodeBlock.builder()
            .begin_control_flow('if (%N > %L)', 'x', 0)
            .add_statement('return %L', 1)
            .next_control_flow('else')
            .add_statement('return %L', 0)
            .end_control_flow()
            .build()
        )

        self.assertEqual(render_to_str(block), 'if (x > 0) {\n  return 1;\n} else {\n  return 0;\n}\n')

    def test_do_while(self):
        block = (
            CodeBlock.builder()
            .begin_control_flow('do')
            .add_statement('i++')
            .end_control_flow('while (i < %L)', 10)
            .build()
        )

        self.assertEqual(render_to_str(block), 'do {\n  i++;\n} while (i < 10);\n')

    def test_nested(self):
        block = (
            CodeBlock.builder()
            .begin_control_flow('for (int i = 0; i < n; i++)')
            .begin_control_flow('if (i %% 2 == 0)')
            .add_comment('even')
            .end_control_flow()
            .end_control_flow()
            .build()
        )

        self.assertEqual(
            render_to_str(block),
            'for (int i = 0; i < n; i++) {\n  if (i % 2 == 0) {\n    // even\n  }\n}\n'
        )

    def test_end_without_begin(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.builder().end_control_flow()

    def test_next_without_begin(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.builder().next_control_flow('else')

    def test_unclosed(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.builder().begin_control_flow('if (x)').build()

    def test_end_args_without_format(self):
        with self.assertRaises(ConstructionError):
            CodeBlock.builder().begin_control_flow('do').end_control_flow(None, 1)


class StatementRenderingTest(unittest.TestCase):
    def test_continuation_lines_are_indented(self):
        block = CodeBlock.builder().add_statement('foo(\n%L)', 'x').add_statement('bar()').build()

        self.assertEqual(render_to_str(block), 'foo(\n  x);\nbar();\n')

    def test_wrapped_statement(self):
        block = CodeBlock.builder().add_statement('%L +%W%L', 'aaaa', 'bbbb').build()

        self.assertEqual(render_to_str(block, CodegenContext(width=10)), 'aaaa +\n  bbbb;\n')

    def test_unwrapped_statement(self):
        block = CodeBlock.builder().add_statement('%L +%W%L', 'aaaa', 'bbbb').build()

        self.assertEqual(render_to_str(block), 'aaaa + bbbb;\n')

    def test_literals(self):
        self.assertEqual(render_to_str(CodeBlock.of('%L %L %L %L', True, False, None, 1.5)), 'true false null 1.5')

    def test_nested_block_literal(self):
        inner = CodeBlock.of('%T.of(%S)', LIST, 'x')

        self.assertEqual(render_to_str(CodeBlock.of('return %L', inner)), 'return java.util.List.of("x")')

    def test_null_string(self):
        self.assertEqual(render_to_str(CodeBlock.of('%S', None)), 'null')


class StringLiteralTest(unittest.TestCase):
    def test_plain(self):
        self.assertEqual(string_literal('abc'), '"abc"')

    def test_quotes(self):
        self.assertEqual(string_literal('say "hi"'), '"say \\"hi\\""')
        self.assertEqual(string_literal("it's"), '"it\'s"')

    def test_escapes(self):
        self.assertEqual(string_literal('a\tb\\c'), '"a\\tb\\\\c"')

    def test_control_characters(self):
        self.assertEqual(string_literal('\x01'), '"\\u0001"')

    def test_multi_line(self):
        self.assertEqual(string_literal('a\nb'), '"a\\n"\n    + "b"')

    def test_trailing_newline(self):
        self.assertEqual(string_literal('a\n'), '"a\\n"')
