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


import csv
import logging
import string

from v8prof.symbols import SymbolKind

from .address import AddressDecodeContext
from .log_entries import CodeCreation, CodeDelete, CodeMove, LogEntryError, Tick, VMState


logger = logging.getLogger('profile')


# Compressed logs abbreviate the entry names
_ALIASES = {
    'cc': 'code-creation',
    'cm': 'code-move',
    'cd': 'code-delete',
    't': 'tick',
}


class LogParser:
    """
    Decodes the lines of a V8 ``--prof`` log into log entries.

    Only code lifecycle entries and ticks are returned, everything else is
    skipped. Delta-encoded addresses are resolved against the previous
    address of the same field, so lines must be fed in log order.
    """

    def __init__(self):
        self._context = AddressDecodeContext()

    @property
    def context(self):
        return self._context

    def parse_lines(self, lines):
        reader = csv.reader(lines)
        for fields in reader:
            if not fields:
                continue

            line_number = reader.line_num
            try:
                count, entry = self._parse_fields(fields, line_number)
            except (ValueError, IndexError) as e:
                raise LogEntryError('Malformed %s entry: %s' % (fields[0], e), line_number) from e

            for _ in range(count):
                if entry is not None:
                    yield entry

    def _parse_fields(self, fields, line_number):
        count = 1
        if fields[0] == 'repeat':
            count = int(fields[1])
            fields = fields[2:]

        name = _ALIASES.get(fields[0], fields[0])
        args = fields[1:]

        if name == 'code-creation':
            entry = self._code_creation(args, line_number)
        elif name == 'code-move':
            entry = self._code_move(args, line_number)
        elif name == 'code-delete':
            entry = CodeDelete(self._context.decode('code-delete', args[0]), line_number)
        elif name == 'tick':
            entry = self._tick(args, line_number)
        else:
            logger.debug('Skipping %s entry at line %d', name, line_number)
            entry = None

        return count, entry

    def _code_creation(self, args, line_number):
        kind = SymbolKind.from_tag(args[0])
        if kind == SymbolKind.UNKNOWN:
            logger.debug('Unknown code kind %s at line %d', args[0], line_number)

        address = self._context.decode('code-creation', args[1])
        length = int(args[2])
        if length < 0:
            raise ValueError('negative code size %d' % length)

        name = args[3] if len(args) > 3 else ''
        return CodeCreation(kind, address, length, name, line_number)

    def _code_move(self, args, line_number):
        from_address = self._context.decode('code-move-from', args[0])
        to_address = self._context.decode('code-move-to', args[1])
        return CodeMove(from_address, to_address, line_number)

    def _tick(self, args, line_number):
        pc = self._context.decode('tick-pc', args[0])
        sp = self._context.decode('tick-sp', args[1])
        vm_state = VMState.from_value(int(args[2]))

        # Delta frames are relative to the previous delta frame, the first
        # one to pc. Absolute frames do not move the base.
        stack = []
        prev = pc
        for frame in args[3:]:
            frame = frame.strip()
            if not frame:
                continue

            if frame[0] in ('+', '-'):
                prev = prev + int(frame, 16)
                address = prev
            elif frame[0] in string.hexdigits:
                address = int(frame, 16)
            else:
                # e.g. the 'overflow' marker of truncated stacks
                logger.debug('Dropping stack frame %s at line %d', frame, line_number)
                continue

            if address < 0:
                raise ValueError('stack frame %r decodes to a negative address' % frame)
            stack.append(address)

        return Tick(pc, sp, vm_state, stack, line_number)


def parse_lines(lines):
    """
    Parse an iterable of log lines and return the list of log entries.
    """
    return list(LogParser().parse_lines(lines))


def parse(path):
    """
    Parse the log file at ``path`` and return the list of log entries.
    """
    logger.info('Parsing %s', path)

    with open(path, 'r', newline='') as f:
        entries = parse_lines(f)

    logger.debug('Found %d entries in %s', len(entries), path)
    return entries
