import threading
import time
import unittest

from atmfjstc.lib.java_codegen.errors import ConstructionError, LazyInitializationError
from atmfjstc.lib.java_codegen.lazy import LazyNode
from atmfjstc.lib.java_codegen.ast.members import FieldSpec, MethodSpec
from atmfjstc.lib.java_codegen.ast.modifiers import Modifier
from atmfjstc.lib.java_codegen.ast.names import PrimitiveTypeName, INT, LONG, VOID


class CountingNode(LazyNode):
    def __init__(self, builder):
        super().__init__(builder)
        self.calls = 0

    def _materialize(self, builder):
        self.calls += 1
        time.sleep(builder.get('delay', 0))

        if builder.get('fail', False):
            raise RuntimeError("boom")

        return PrimitiveTypeName(builder['keyword'])


class LazyNodeTest(unittest.TestCase):
    def test_deferred_until_first_use(self):
        node = CountingNode(dict(keyword='int'))

        self.assertFalse(node.is_initialized)
        self.assertEqual(node.calls, 0)

        self.assertEqual(node.keyword, 'int')
        self.assertTrue(node.is_initialized)
        self.assertEqual(node.calls, 1)

    def test_initialized_once(self):
        node = CountingNode(dict(keyword='int'))

        for _ in range(3):
            self.assertEqual(node.keyword, 'int')

        self.assertEqual(node.calls, 1)

    def test_concurrent_first_use(self):
        node = CountingNode(dict(keyword='int', delay=0.05))
        barrier = threading.Barrier(8)
        results = []

        def _worker():
            barrier.wait()
            results.append(node.ensure_initialized())

        threads = [threading.Thread(target=_worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(node.calls, 1)
        self.assertEqual(len(results), 8)
        self.assertTrue(all(result is results[0] for result in results))

    def test_failure_is_remembered(self):
        node = CountingNode(dict(keyword='int', fail=True))

        with self.assertLogs('atmfjstc.lib.java_codegen.lazy', level='ERROR'):
            with self.assertRaises(LazyInitializationError) as cm:
                node.ensure_initialized()

        self.assertIsInstance(cm.exception.__cause__, RuntimeError)
        self.assertEqual(cm.exception.node_type, 'CountingNode')

        with self.assertRaises(LazyInitializationError):
            _ = node.keyword

        self.assertEqual(node.calls, 1)
        self.assertFalse(node.is_initialized)

    def test_lazy_error_is_construction_error(self):
        node = CountingNode(dict(keyword='int', fail=True))

        with self.assertLogs('atmfjstc.lib.java_codegen.lazy', level='ERROR'):
            with self.assertRaises(ConstructionError):
                node.ensure_initialized()

    def test_private_attributes_are_not_delegated(self):
        node = CountingNode(dict(keyword='int'))

        with self.assertRaises(AttributeError):
            _ = node._no_such_attribute

        self.assertFalse(node.is_initialized)

    def test_equality(self):
        self.assertEqual(CountingNode(dict(keyword='int')), CountingNode(dict(keyword='int')))
        self.assertEqual(hash(CountingNode(dict(keyword='int'))), hash(CountingNode(dict(keyword='int'))))
        self.assertNotEqual(CountingNode(dict(keyword='int')), CountingNode(dict(keyword='long')))
        self.assertNotEqual(CountingNode(dict(keyword='int')), 'int')


class DeclarationLazinessTest(unittest.TestCase):
    def test_builder_changes_before_first_use_are_seen(self):
        builder = FieldSpec.builder(INT, 'x')
        field = builder.build()

        builder.add_modifiers(Modifier.PRIVATE)

        self.assertEqual(field.modifiers, frozenset([Modifier.PRIVATE]))

    def test_snapshot_is_frozen_after_first_use(self):
        builder = FieldSpec.builder(INT, 'x')
        field = builder.build()

        self.assertEqual(field.modifiers, frozenset())

        builder.add_modifiers(Modifier.FINAL)

        self.assertEqual(field.modifiers, frozenset())

    def test_equal_specifications_are_interchangeable(self):
        first = FieldSpec.builder(INT, 'x', Modifier.PRIVATE).initializer('%L', 0).build()
        second = FieldSpec.builder(INT, 'x', Modifier.PRIVATE).initializer('%L', 0).build()

        self.assertEqual(first, second)
        self.assertEqual(len({first, second}), 1)
        self.assertNotEqual(first, FieldSpec.builder(LONG, 'x', Modifier.PRIVATE).initializer('%L', 0).build())

    def test_different_declaration_types_are_not_equal(self):
        self.assertNotEqual(FieldSpec.of(INT, 'x'), MethodSpec.method_builder('x').build())

    def test_validation_happens_on_first_use(self):
        field = FieldSpec.of(VOID, 'x')

        with self.assertLogs('atmfjstc.lib.java_codegen.lazy', level='ERROR'):
            with self.assertRaises(LazyInitializationError) as cm:
                _ = field.name

        self.assertIsInstance(cm.exception.__cause__, ConstructionError)

    def test_unclosed_method_code_fails_on_first_use(self):
        method = MethodSpec.method_builder('run').begin_control_flow('if (x)').build()

        with self.assertLogs('atmfjstc.lib.java_codegen.lazy', level='ERROR'):
            with self.assertRaises(LazyInitializationError):
                _ = method.code

    def test_invalid_name_fails_immediately(self):
        with self.assertRaises(ConstructionError):
            FieldSpec.builder(INT, 'class')
