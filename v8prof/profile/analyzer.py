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

from collections import namedtuple

from v8prof.symbols import Symbol, SymbolTable

from .log_entries import LogEntryType


logger = logging.getLogger('profile')

DEFAULT_MAX_STACK_DEPTH = 64


ResolvedFrame = namedtuple('ResolvedFrame', ['address', 'symbol'])
ResolvedTick = namedtuple('ResolvedTick', ['vm_state', 'frames'])


class ProfileSession:
    """
    The state of one log replay. It owns the symbol table that maps code
    addresses to the code that currently lives there.
    """

    def __init__(self, symbols=None, max_stack_depth=DEFAULT_MAX_STACK_DEPTH):
        if symbols is None:
            symbols = SymbolTable()

        self._symbols = symbols
        self._max_stack_depth = max_stack_depth

    @property
    def symbols(self):
        return self._symbols

    def create_code(self, entry):
        self._symbols.add(Symbol(entry.name, entry.kind, entry.address, entry.length))

    def move_code(self, entry):
        symbol = self._symbols.lookup(entry.from_address)
        if symbol is None:
            logger.debug('No code at %#x to move to %#x', entry.from_address, entry.to_address)
            return

        self._symbols.remove(symbol)
        self._symbols.add(symbol.relocated(entry.to_address))

    def delete_code(self, entry):
        symbol = self._symbols.lookup(entry.address)
        if symbol is None:
            logger.debug('No code to delete at %#x', entry.address)
            return

        self._symbols.remove(symbol)

    def apply(self, entry):
        """
        Update the symbol table with a code lifecycle entry. Other entries
        are ignored.
        """
        if entry.TYPE == LogEntryType.CODE_CREATION:
            self.create_code(entry)
        elif entry.TYPE == LogEntryType.CODE_MOVE:
            self.move_code(entry)
        elif entry.TYPE == LogEntryType.CODE_DELETE:
            self.delete_code(entry)

    def resolve(self, address):
        return self._symbols.lookup(address)

    def resolve_tick(self, tick):
        """
        Map the pc and the stack addresses of a tick to symbols, innermost
        frame first. Unresolved frames have a ``None`` symbol.
        """
        addresses = [tick.pc] + tick.stack
        frames = [ResolvedFrame(addr, self._symbols.lookup(addr))
                  for addr in addresses[:self._max_stack_depth]]
        return ResolvedTick(tick.vm_state, frames)


class Analyzer:
    """
    This class replays a profiler log. The client is passed a callback that
    the analyzer calls on every log entry.

    While replaying, the analyzer keeps the session's symbol table up to date
    so that the callback can resolve any address that was live at the time
    the entry was logged.
    """

    def __init__(self, entries, cb=None, session=None):
        """
        :param entries: log entries, as returned by the ``parse`` function
        :param cb: callback invoked after every entry is applied. The first
        argument is the ``ProfileSession``, the second is the entry.
        :param session: the session to update, a new one by default
        """
        self._entries = entries
        self._cb = cb
        self._session = session or ProfileSession()

    @property
    def session(self):
        return self._session

    def walk(self):
        for entry in self._entries:
            self._session.apply(entry)

            if self._cb:
                self._cb(self._session, entry)

        return self._session
