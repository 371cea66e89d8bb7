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


from unittest import TestCase

from v8prof.symbols import AddressSpan, InvalidSpanError, Symbol, SymbolKind, SymbolTable, compare


class AddressSpanTestCase(TestCase):
    def test_str(self):
        self.assertEqual(str(AddressSpan(0x1000, 0x10)), '0x1000-0x1010')
        self.assertEqual(str(AddressSpan(0, 0)), '0x0-0x0')

    def test_compare_overlap_is_equal(self):
        a = AddressSpan(0x1000, 0x10)

        self.assertEqual(compare(a, AddressSpan(0x1008, 0x100)), 0)
        self.assertEqual(compare(AddressSpan(0x0ff0, 0x10), a), 0)
        self.assertEqual(compare(a, AddressSpan(0x1004, 0)), 0)
        self.assertEqual(a, AddressSpan(0x1004, 0))

    def test_compare_end_is_inclusive(self):
        a = AddressSpan(0x1000, 0x10)

        self.assertEqual(compare(a, AddressSpan(0x1010, 0)), 0)
        self.assertEqual(compare(AddressSpan(0x1010, 0), a), 0)
        self.assertEqual(compare(a, AddressSpan(0x1011, 0)), -1)
        self.assertEqual(compare(AddressSpan(0x1011, 0), a), 1)

    def test_compare_disjoint(self):
        a = AddressSpan(0x1000, 0x10)
        b = AddressSpan(0x2000, 0x10)

        self.assertEqual(compare(a, b), -1)
        self.assertEqual(compare(b, a), 1)
        self.assertLess(a, b)
        self.assertGreater(b, a)
        self.assertNotEqual(a, b)

    def test_contains(self):
        span = AddressSpan(0x1000, 0x10)

        self.assertTrue(span.contains(0x1000))
        self.assertTrue(span.contains(0x1010))
        self.assertFalse(span.contains(0xfff))
        self.assertFalse(span.contains(0x1011))

    def test_same_extent(self):
        span = AddressSpan(0x1000, 0x10)

        self.assertTrue(span.same_extent(AddressSpan(0x1000, 0x10)))
        self.assertFalse(span.same_extent(AddressSpan(0x1000, 0x8)))
        self.assertFalse(span.same_extent(AddressSpan(0x1008, 0x8)))

    def test_compare_other_types(self):
        span = AddressSpan(0x1000, 0x10)

        self.assertNotEqual(span, None)
        self.assertFalse(span == 0x1000)
        with self.assertRaises(TypeError):
            span < 0x1000  # pylint: disable=pointless-statement

    def test_unhashable(self):
        with self.assertRaises(TypeError):
            hash(AddressSpan(0x1000, 0x10))

    def test_invalid_span(self):
        with self.assertRaises(InvalidSpanError):
            AddressSpan(0x1000, -1)

        with self.assertRaises(InvalidSpanError):
            AddressSpan(-1, 0x10)

        with self.assertRaises(ValueError):
            Symbol('f', SymbolKind.FUNCTION, 0x1000, -4)


class SymbolTestCase(TestCase):
    def test_accessors(self):
        sym = Symbol('f', SymbolKind.LAZY_COMPILE, 0x1000, 0x10)

        self.assertEqual(sym.name, 'f')
        self.assertEqual(sym.kind, SymbolKind.LAZY_COMPILE)
        self.assertEqual(sym.address, 0x1000)
        self.assertEqual(sym.length, 0x10)
        self.assertEqual(sym.span.end, 0x1010)
        self.assertEqual(str(sym), 'f : 0x1000-0x1010')

    def test_relocated(self):
        sym = Symbol('f', SymbolKind.STUB, 0x1000, 0x10)
        moved = sym.relocated(0x8000)

        self.assertEqual(moved.name, 'f')
        self.assertEqual(moved.kind, SymbolKind.STUB)
        self.assertEqual(str(moved.span), '0x8000-0x8010')
        self.assertEqual(sym.address, 0x1000)

    def test_kind_from_tag(self):
        self.assertEqual(SymbolKind.from_tag('LazyCompile'), SymbolKind.LAZY_COMPILE)
        self.assertEqual(SymbolKind.from_tag('KeyedLoadIC'), SymbolKind.KEYED_LOAD_IC)
        self.assertEqual(SymbolKind.from_tag('NotAKind'), SymbolKind.UNKNOWN)


class SymbolTableTestCase(TestCase):
    def setUp(self):
        self.table = SymbolTable()

    def test_empty_table(self):
        self.assertIsNone(self.table.lookup(0x1000))
        self.assertEqual(len(self.table), 0)
        self.assertEqual(list(self.table), [])

    def test_boundaries(self):
        f = Symbol('f', SymbolKind.FUNCTION, 0x1000, 0x10)
        self.table.add(f)

        self.assertIs(self.table.lookup(0x1000), f)
        self.assertIs(self.table.lookup(0x1008), f)
        self.assertIs(self.table.lookup(0x1010), f)
        self.assertIsNone(self.table.lookup(0x1011))
        self.assertIsNone(self.table.lookup(0xfff))

    def test_containment(self):
        syms = [
            Symbol('a', SymbolKind.BUILTIN, 0x100, 0x20),
            Symbol('b', SymbolKind.STUB, 0x200, 0x1),
            Symbol('c', SymbolKind.SCRIPT, 0x300, 0x80),
        ]
        for sym in syms:
            self.table.add(sym)

        for sym in syms:
            for addr in range(sym.address, sym.span.end + 1):
                self.assertIs(self.table.lookup(addr), sym)

            self.assertIsNone(self.table.lookup(sym.address - 1))
            self.assertIsNone(self.table.lookup(sym.span.end + 1))

    def test_disjoint_entries(self):
        a = Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x10)
        b = Symbol('B', SymbolKind.FUNCTION, 0x2000, 0x10)
        self.table.add(a)
        self.table.add(b)

        self.assertIs(self.table.lookup(0x1005), a)
        self.assertIs(self.table.lookup(0x2005), b)
        self.assertIsNone(self.table.lookup(0x1800))

        self.assertTrue(self.table.remove(a))
        self.assertIsNone(self.table.lookup(0x1005))
        self.assertIs(self.table.lookup(0x2005), b)

    def test_overwrite_on_overlap(self):
        a = Symbol('A', SymbolKind.LAZY_COMPILE, 0x1000, 0x100)
        b = Symbol('B', SymbolKind.FUNCTION, 0x1080, 0x100)
        self.table.add(a)
        self.table.add(b)

        self.assertEqual(len(self.table), 1)
        self.assertIs(self.table.lookup(0x1090), b)
        self.assertIs(self.table.lookup(0x1170), b)
        # The whole of A is gone, not only the overlapping part
        self.assertIsNone(self.table.lookup(0x1000))
        self.assertIsNone(self.table.lookup(0x107f))

    def test_overwrite_several_entries(self):
        self.table.add(Symbol('A', SymbolKind.STUB, 0x1000, 0x10))
        self.table.add(Symbol('B', SymbolKind.STUB, 0x1020, 0x10))
        self.table.add(Symbol('C', SymbolKind.STUB, 0x1040, 0x10))
        d = Symbol('D', SymbolKind.STUB, 0x2000, 0x10)
        self.table.add(d)

        e = Symbol('E', SymbolKind.FUNCTION, 0x1008, 0x40)
        self.table.add(e)

        self.assertEqual([sym.name for sym in self.table], ['E', 'D'])
        self.assertIs(self.table.lookup(0x1040), e)
        self.assertIsNone(self.table.lookup(0x1004))
        self.assertIs(self.table.lookup(0x2000), d)

    def test_touching_spans_overlap(self):
        a = Symbol('A', SymbolKind.STUB, 0x1000, 0x10)
        b = Symbol('B', SymbolKind.STUB, 0x1010, 0x10)
        self.table.add(a)
        self.table.add(b)

        self.assertEqual(list(self.table), [b])
        self.assertIs(self.table.lookup(0x1010), b)
        self.assertIsNone(self.table.lookup(0x1000))

    def test_same_span_replaced(self):
        a = Symbol('A', SymbolKind.LAZY_COMPILE, 0x1000, 0x10)
        b = Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x10)
        self.table.add(a)
        self.table.add(b)

        self.assertEqual(len(self.table), 1)
        self.assertIs(self.table.lookup(0x1000), b)

    def test_remove(self):
        a = Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x10)
        self.table.add(a)

        self.assertTrue(self.table.remove(a))
        for addr in range(0x1000, 0x1011):
            self.assertIsNone(self.table.lookup(addr))

    def test_remove_equivalent_span(self):
        self.table.add(Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x10))

        self.assertTrue(self.table.remove(Symbol('other', SymbolKind.UNKNOWN, 0x1000, 0x10)))
        self.assertEqual(len(self.table), 0)

    def test_remove_twice(self):
        a = Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x10)
        b = Symbol('B', SymbolKind.FUNCTION, 0x2000, 0x10)
        self.table.add(a)
        self.table.add(b)

        self.assertTrue(self.table.remove(a))
        self.assertFalse(self.table.remove(a))
        self.assertEqual(list(self.table), [b])

    def test_remove_overwritten_symbol(self):
        a = Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x100)
        b = Symbol('B', SymbolKind.FUNCTION, 0x1080, 0x100)
        self.table.add(a)
        self.table.add(b)

        self.assertFalse(self.table.remove(a))
        self.assertIs(self.table.lookup(0x1090), b)

    def test_remove_partial_match(self):
        a = Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x100)
        self.table.add(a)

        self.assertFalse(self.table.remove(Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x10)))
        self.assertFalse(self.table.remove(Symbol('A', SymbolKind.FUNCTION, 0x1010, 0x10)))
        self.assertIs(self.table.lookup(0x1000), a)

    def test_iteration_order(self):
        for name, address in (('c', 0x3000), ('a', 0x1000), ('b', 0x2000)):
            self.table.add(Symbol(name, SymbolKind.FUNCTION, address, 0x10))

        self.assertEqual([sym.name for sym in self.table], ['a', 'b', 'c'])
        # Iteration can be restarted and does not change the table
        self.assertEqual([sym.name for sym in self.table], ['a', 'b', 'c'])
        self.assertEqual(len(self.table), 3)

    def test_zero_length_symbol(self):
        point = Symbol('p', SymbolKind.STUB, 0x1000, 0)
        self.table.add(point)

        self.assertIs(self.table.lookup(0x1000), point)
        self.assertIsNone(self.table.lookup(0x1001))

    def test_high_addresses(self):
        top = Symbol('top', SymbolKind.BUILTIN, 0xfffffffffffff000, 0xfff)
        self.table.add(top)

        self.assertIs(self.table.lookup(0xffffffffffffffff), top)
        self.assertIsNone(self.table.lookup(0xffffffffffffefff))
        self.assertIsNone(self.table.lookup(0x10000000000000000))

    def test_contains(self):
        self.table.add(Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x10))

        self.assertIn(0x1004, self.table)
        self.assertNotIn(0x2000, self.table)

    def test_negative_address(self):
        self.table.add(Symbol('A', SymbolKind.FUNCTION, 0, 0x10))

        self.assertIsNone(self.table.lookup(-1))

    def test_clear(self):
        self.table.add(Symbol('A', SymbolKind.FUNCTION, 0x1000, 0x10))
        self.table.clear()

        self.assertEqual(len(self.table), 0)
        self.assertIsNone(self.table.lookup(0x1000))

    def test_many_entries(self):
        syms = [Symbol('f%d' % i, SymbolKind.FUNCTION, 0x10000 + i * 0x100, 0x80)
                for i in reversed(range(500))]
        for sym in syms:
            self.table.add(sym)

        self.assertEqual(len(self.table), 500)
        for sym in syms:
            self.assertIs(self.table.lookup(sym.address + 0x40), sym)
            self.assertIsNone(self.table.lookup(sym.address + 0x81))
