import subprocess
import sys
import unittest


MODULES = [
    'atmfjstc.lib.java_codegen.ast.code',
    'atmfjstc.lib.java_codegen.ast.members',
    'atmfjstc.lib.java_codegen.ast.types',
    'atmfjstc.lib.java_codegen.ast.files',
    'atmfjstc.lib.java_codegen.CodeWriter',
    'atmfjstc.lib.java_codegen.render',
]


class ImportTest(unittest.TestCase):
    def test_modules_import_in_a_fresh_interpreter(self):
        for module_name in MODULES:
            with self.subTest(module=module_name):
                result = subprocess.run(
                    [sys.executable, '-c', f'import {module_name}'], capture_output=True, text=True
                )

                self.assertEqual(result.returncode, 0, result.stderr)
