"""
Copyright (c) 2018 Cyberhaven

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""


import os
import shutil
import tempfile
from unittest import TestCase

from v8prof.symbols import Symbol, SymbolKind, SymbolTable
from v8prof.symbols.dump import dump_html, dump_text, export_rows


class DumpTestCase(TestCase):
    def setUp(self):
        self.table = SymbolTable()
        self.table.add(Symbol('foo <a.js:3>', SymbolKind.LAZY_COMPILE, 0x2000, 0x100))
        self.table.add(Symbol('ArrayPush', SymbolKind.BUILTIN, 0x1000, 0x10))

    def test_export_rows(self):
        self.assertEqual(export_rows(self.table),
                         [('ArrayPush', '1000', 16), ('foo <a.js:3>', '2000', 256)])

    def test_dump_text(self):
        lines = dump_text(self.table).splitlines()

        self.assertEqual(len(lines), 2)
        self.assertIn('ArrayPush', lines[0])
        self.assertIn('BUILTIN', lines[0])
        self.assertTrue(lines[1].startswith('0x0000000000002000'))

    def test_dump_text_empty(self):
        self.assertEqual(dump_text(SymbolTable()), '')

    def test_dump_html(self):
        html = dump_html(self.table)

        self.assertTrue(html.startswith('<table>'))
        self.assertIn('<tr><td>ArrayPush</td><td>1000</td><td>16</td></tr>', html)
        # Names are escaped
        self.assertIn('<td>foo &lt;a.js:3&gt;</td>', html)

    def test_dump_html_to_file(self):
        tmp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, tmp_dir)
        output_path = os.path.join(tmp_dir, 'symbols.html')

        html = dump_html(self.table, output_path)

        with open(output_path, 'r') as f:
            self.assertEqual(f.read(), html)
