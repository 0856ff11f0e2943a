import unittest

from atmfjstc.lib.java_codegen.ast.names import QualifiedName, PrimitiveTypeName, TypeVariableName, INT, VOID, STRING, \
    array_of, parameterized
from atmfjstc.lib.java_codegen.render import render_to_str


MAP_ENTRY = QualifiedName.of('java.util', 'Map', 'Entry')
LIST = QualifiedName.of('java.util', 'List')


class QualifiedNameTest(unittest.TestCase):
    def test_parts(self):
        self.assertEqual(MAP_ENTRY.package_name, 'java.util')
        self.assertEqual(MAP_ENTRY.simple_names, ('Map', 'Entry'))
        self.assertEqual(MAP_ENTRY.simple_name, 'Entry')

    def test_canonical_name(self):
        self.assertEqual(MAP_ENTRY.canonical_name, 'java.util.Map.Entry')

    def test_canonical_name_default_package(self):
        self.assertEqual(QualifiedName.of('', 'Foo', 'Bar').canonical_name, 'Foo.Bar')

    def test_reflection_name(self):
        self.assertEqual(MAP_ENTRY.reflection_name, 'java.util.Map$Entry')

    def test_enclosing_and_top_level(self):
        self.assertEqual(MAP_ENTRY.enclosing_name(), QualifiedName.of('java.util', 'Map'))
        self.assertEqual(MAP_ENTRY.top_level_name(), QualifiedName.of('java.util', 'Map'))
        self.assertIsNone(LIST.enclosing_name())

    def test_nested_and_peer(self):
        self.assertEqual(QualifiedName.of('java.util', 'Map').nested('Entry'), MAP_ENTRY)
        self.assertEqual(LIST.peer('Set'), QualifiedName.of('java.util', 'Set'))

    def test_equality_and_hash(self):
        other = QualifiedName.of('java.util', 'Map', 'Entry')

        self.assertEqual(MAP_ENTRY, other)
        self.assertEqual(hash(MAP_ENTRY), hash(other))
        self.assertNotEqual(MAP_ENTRY, QualifiedName.of('java.util', 'Map'))

    def test_ordering(self):
        names = [QualifiedName.of('java.util', 'Set'), LIST, QualifiedName.of('java.io', 'File')]

        self.assertEqual(
            [name.canonical_name for name in sorted(names)],
            ['java.io.File', 'java.util.List', 'java.util.Set']
        )

    def test_best_guess(self):
        self.assertEqual(QualifiedName.best_guess('java.util.Map.Entry'), MAP_ENTRY)
        self.assertEqual(QualifiedName.best_guess('Foo'), QualifiedName.of('', 'Foo'))

    def test_best_guess_fails(self):
        for text in ('java.util', 'java.util.Map.entry', ''):
            with self.subTest(text=text), self.assertRaises(ValueError):
                QualifiedName.best_guess(text)

    def test_invalid_names(self):
        for names in (('java.util',), ('java.util', 'class'), ('java.util', '1Foo')):
            with self.subTest(names=names), self.assertRaises(ValueError):
                QualifiedName(names)


class TypeNameRenderingTest(unittest.TestCase):
    def test_primitive(self):
        self.assertEqual(render_to_str(INT), 'int')
        self.assertFalse(VOID.is_primitive)
        self.assertTrue(INT.is_primitive)

    def test_invalid_primitive(self):
        with self.assertRaises(ValueError):
            PrimitiveTypeName('string')

    def test_qualified_name_alone_is_fully_qualified(self):
        self.assertEqual(render_to_str(MAP_ENTRY), 'java.util.Map.Entry')

    def test_array(self):
        self.assertEqual(render_to_str(array_of(array_of(INT))), 'int[][]')

    def test_array_of_void(self):
        with self.assertRaises(ValueError):
            array_of(VOID)

    def test_parameterized(self):
        self.assertEqual(
            render_to_str(parameterized(QualifiedName.of('java.util', 'Map'), STRING, parameterized(LIST, STRING))),
            'java.util.Map<java.lang.String, java.util.List<java.lang.String>>'
        )

    def test_parameterized_with_primitive(self):
        with self.assertRaises(ValueError):
            parameterized(LIST, INT)

    def test_type_variable(self):
        self.assertEqual(render_to_str(TypeVariableName('T', (STRING,))), 'T')
