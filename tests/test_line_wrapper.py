import unittest

from io import StringIO

from atmfjstc.lib.java_codegen.LineWrapper import LineWrapper


def _run(column_limit, *ops, indent_unit='  '):
    out = StringIO()
    wrapper = LineWrapper(out, indent_unit, column_limit)

    for op in ops:
        if isinstance(op, str):
            wrapper.append(op)
        elif op[0] == 'W':
            wrapper.wrapping_space(op[1])
        else:
            wrapper.zero_width_space(op[1])

    wrapper.close()

    return out.getvalue()


class LineWrapperTest(unittest.TestCase):
    def test_no_wrap_needed(self):
        self.assertEqual(_run(10, 'abc', ('W', 1), 'def'), 'abc def')

    def test_wrap(self):
        self.assertEqual(_run(10, 'abcde', ('W', 2), 'fghij'), 'abcde\n    fghij')

    def test_wrap_exactly_at_limit(self):
        self.assertEqual(_run(10, 'abcd', ('W', 1), 'fghij'), 'abcd fghij')

    def test_wrap_with_tabs(self):
        self.assertEqual(_run(10, 'abcde', ('W', 2), 'fghij', indent_unit='\t'), 'abcde\n\t\tfghij')

    def test_only_latest_space_wraps(self):
        self.assertEqual(_run(10, 'aaaa', ('W', 1), 'bb', ('W', 1), 'cccc'), 'aaaa bb\n  cccc')

    def test_buffered_text_moves_to_new_line(self):
        self.assertEqual(_run(10, 'aaaa', ('W', 1), 'bbb', 'ccc'), 'aaaa\n  bbbccc')

    def test_zero_width_space(self):
        self.assertEqual(_run(10, 'abcdefgh', ('Z', 1), 'ijk'), 'abcdefgh\n  ijk')
        self.assertEqual(_run(10, 'abc', ('Z', 1), 'def'), 'abcdef')

    def test_zero_width_space_at_line_start_is_ignored(self):
        self.assertEqual(_run(10, ('Z', 1), 'x'), 'x')

    def test_newline_resets_column(self):
        self.assertEqual(_run(10, 'abc', ('W', 1), 'de\nfghijkl', ('W', 1), 'mn'), 'abc de\nfghijkl mn')

    def test_text_with_newline_that_would_overflow(self):
        self.assertEqual(_run(10, 'abcdefg', ('W', 1), 'hijk\nl'), 'abcdefg\n  hijk\nl')

    def test_unsafe_overflow_is_allowed(self):
        self.assertEqual(_run(5, 'abcdefghij', ('W', 1), 'k'), 'abcdefghij\n  k')

    def test_column(self):
        out = StringIO()
        wrapper = LineWrapper(out, '  ', 100)

        wrapper.append('abc\nde')
        self.assertEqual(wrapper.column, 2)

        wrapper.wrapping_space(1)
        self.assertEqual(wrapper.column, 3)

    def test_append_after_close(self):
        wrapper = LineWrapper(StringIO(), '  ', 10)
        wrapper.close()

        with self.assertRaises(ValueError):
            wrapper.append('x')
