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


import logging

from enum import Enum
from functools import total_ordering

from sortedcontainers import SortedKeyList


logger = logging.getLogger('symbols')


class InvalidSpanError(ValueError):
    """
    An address span was built from a negative address or a negative length.
    """


class SymbolKind(Enum):
    """
    The tag of a ``code-creation`` log entry.

    The symbol table never looks at it, it only travels with the symbol so
    that reports can tell builtins, stubs and compiled script code apart.
    """

    UNKNOWN = 0
    BUILTIN = 1
    STUB = 2
    SCRIPT = 3
    LAZY_COMPILE = 4
    FUNCTION = 5
    EVAL = 6
    REG_EXP = 7
    CALLBACK = 8
    CALL_IC = 9
    LOAD_IC = 10
    STORE_IC = 11
    KEYED_CALL_IC = 12
    KEYED_LOAD_IC = 13
    KEYED_STORE_IC = 14
    CALL_INITIALIZE = 15
    CALL_PRE_MONOMORPHIC = 16
    CALL_NORMAL = 17
    CALL_MEGAMORPHIC = 18
    CALL_MISS = 19
    LOAD_INITIALIZE = 20
    STORE_INITIALIZE = 21

    @classmethod
    def from_tag(cls, tag):
        """
        Map a log tag such as ``LazyCompile`` or ``KeyedLoadIC`` to a kind.
        Unrecognized tags map to ``UNKNOWN``.
        """
        return _TAG_TO_KIND.get(tag, cls.UNKNOWN)


_TAG_TO_KIND = {
    'Builtin': SymbolKind.BUILTIN,
    'Stub': SymbolKind.STUB,
    'Script': SymbolKind.SCRIPT,
    'LazyCompile': SymbolKind.LAZY_COMPILE,
    'Function': SymbolKind.FUNCTION,
    'Eval': SymbolKind.EVAL,
    'RegExp': SymbolKind.REG_EXP,
    'Callback': SymbolKind.CALLBACK,
    'CallIC': SymbolKind.CALL_IC,
    'LoadIC': SymbolKind.LOAD_IC,
    'StoreIC': SymbolKind.STORE_IC,
    'KeyedCallIC': SymbolKind.KEYED_CALL_IC,
    'KeyedLoadIC': SymbolKind.KEYED_LOAD_IC,
    'KeyedStoreIC': SymbolKind.KEYED_STORE_IC,
    'CallInitialize': SymbolKind.CALL_INITIALIZE,
    'CallPreMonomorphic': SymbolKind.CALL_PRE_MONOMORPHIC,
    'CallNormal': SymbolKind.CALL_NORMAL,
    'CallMegamorphic': SymbolKind.CALL_MEGAMORPHIC,
    'CallMiss': SymbolKind.CALL_MISS,
    'LoadInitialize': SymbolKind.LOAD_INITIALIZE,
    'StoreInitialize': SymbolKind.STORE_INITIALIZE,
}


def compare(a, b):
    """
    Three-way comparison of two address spans where any overlap counts as
    equality. Both ends of a span are inclusive.

    This is a matching predicate, not a total order. It is only a valid sort
    key for a collection in which no two spans overlap. A probe span may
    overlap at most one member of such a collection.
    """
    # Access fields directly, using properties is too slow
    # pylint: disable=protected-access
    a_start = a._start
    b_start = b._start
    a_end = a_start + a._length
    b_end = b_start + b._length

    if a_start <= b_start <= a_end:
        return 0
    if b_start <= a_start <= b_end:
        return 0
    if a_start < b_start:
        return -1
    return 1


@total_ordering
class AddressSpan:
    """
    A block of code occupying ``length`` bytes starting at ``start``.
    """

    __slots__ = '_start', '_length'

    def __init__(self, start, length):
        if start < 0 or length < 0:
            raise InvalidSpanError('Invalid address span start=%d length=%d' % (start, length))

        self._start = start
        self._length = length

    @property
    def start(self):
        return self._start

    @property
    def length(self):
        return self._length

    @property
    def end(self):
        return self._start + self._length

    def contains(self, address):
        return self._start <= address <= self._start + self._length

    def same_extent(self, other):
        return self._start == other._start and self._length == other._length

    # Overlapping spans compare equal, so spans cannot be dict or set keys
    __hash__ = None

    def __eq__(self, other):
        if not isinstance(other, AddressSpan):
            return NotImplemented
        return compare(self, other) == 0

    def __lt__(self, other):
        if not isinstance(other, AddressSpan):
            return NotImplemented
        return compare(self, other) < 0

    def __repr__(self):
        return 'AddressSpan(%#x, %d)' % (self._start, self._length)

    def __str__(self):
        return '%#x-%#x' % (self._start, self._start + self._length)


class Symbol:
    """
    A named block of generated code. ``code-creation`` log entries create
    these so that program counters in tick samples can be looked up.
    """

    __slots__ = '_name', '_kind', '_span'

    def __init__(self, name, kind, address, length):
        self._name = name
        self._kind = kind
        self._span = AddressSpan(address, length)

    @property
    def name(self):
        return self._name

    @property
    def kind(self):
        return self._kind

    @property
    def span(self):
        return self._span

    @property
    def address(self):
        return self._span.start

    @property
    def length(self):
        return self._span.length

    def relocated(self, address):
        """
        Return a copy of this symbol moved to ``address``.
        """
        return Symbol(self._name, self._kind, address, self._span.length)

    def __repr__(self):
        return 'Symbol(%r, %s, %#x, %d)' % (self._name, self._kind.name,
                                            self._span.start, self._span.length)

    def __str__(self):
        return '%s : %s' % (self._name, self._span)


def _span_of(symbol):
    return symbol._span  # pylint: disable=protected-access


class SymbolTable:
    """
    Maps addresses to the symbol of the code block that covers them.

    Symbols are kept sorted by their address span using the overlap
    comparison above. The table never holds two overlapping spans: adding a
    symbol evicts every stored symbol whose span overlaps the new one, so
    the most recently generated code wins. Lookup and insertion are done
    using binary search.

    The table is not thread-safe.
    """

    __slots__ = ('_symbols',)

    def __init__(self):
        self._symbols = SortedKeyList(key=_span_of)

    def _overlapping(self, span):
        """
        Return the index range of the stored symbols that overlap ``span``.
        Overlapping entries are contiguous because stored spans are disjoint.
        """
        first = self._symbols.bisect_key_left(span)
        last = first
        count = len(self._symbols)
        while last < count and _span_of(self._symbols[last]) == span:
            last += 1
        return first, last

    def add(self, symbol):
        """
        Add a symbol to the table.

        Collisions overwrite the previous symbols, the whole previous span is
        dropped even if the new symbol only covers part of it.
        """
        first, last = self._overlapping(symbol.span)
        if last > first:
            for old in self._symbols[first:last]:
                logger.debug('Symbol %s replaced by %s', old, symbol)
            del self._symbols[first:last]

        self._symbols.add(symbol)

    def lookup(self, address):
        """
        Return the symbol whose span contains ``address``, or ``None``.
        """
        if address < 0:
            return None

        probe = AddressSpan(address, 0)
        idx = self._symbols.bisect_key_left(probe)
        if idx != len(self._symbols):
            symbol = self._symbols[idx]
            if _span_of(symbol) == probe:
                return symbol

        return None

    def remove(self, symbol):
        """
        Remove the symbol stored with exactly the span of ``symbol``.

        Returns ``False`` and leaves the table untouched if there is no such
        symbol, e.g. because it was already removed or overwritten.
        """
        span = symbol.span
        idx = self._symbols.bisect_key_left(span)
        if idx != len(self._symbols) and _span_of(self._symbols[idx]).same_extent(span):
            del self._symbols[idx]
            return True

        logger.debug('No symbol stored at %s', span)
        return False

    def clear(self):
        self._symbols.clear()

    def __contains__(self, address):
        return self.lookup(address) is not None

    def __iter__(self):
        return iter(self._symbols)

    def __len__(self):
        return len(self._symbols)
