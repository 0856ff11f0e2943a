import unittest

from atmfjstc.lib.java_codegen.CodegenContext import CodegenContext


class CodegenContextTest(unittest.TestCase):
    def test_defaults(self):
        context = CodegenContext()

        self.assertEqual(context.width, 100)
        self.assertEqual(context.indent_unit, '  ')
        self.assertFalse(context.trace)

    def test_derive(self):
        context = CodegenContext(width=80, indent=4)

        derived = context.derive(use_tabs=True)
        self.assertEqual(derived, CodegenContext(width=80, indent=4, use_tabs=True))
        self.assertEqual(derived.indent_unit, '\t')

        self.assertEqual(context.derive(width=40, trace=True), CodegenContext(width=40, indent=4, trace=True))
        self.assertEqual(context.indent_unit, '    ')

    def test_invalid_options(self):
        with self.assertRaises(ValueError):
            CodegenContext(width=0)
        with self.assertRaises(ValueError):
            CodegenContext(indent=-1)
