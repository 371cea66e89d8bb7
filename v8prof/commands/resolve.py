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

from v8prof.command import LogCommand
from v8prof.profile import Analyzer, LogEntryType, ProfileSession


logger = logging.getLogger('resolve')


def format_frame(frame, unknown_frame):
    if frame.symbol is None:
        return '%s @ %#x' % (unknown_frame, frame.address)

    return '%s [%s] @ %#x' % (frame.symbol.name, frame.symbol.kind.name, frame.address)


class StackResolver:
    """
    Resolves the stack of every tick against the code that was live when the
    tick was sampled.
    """

    def __init__(self, entries, max_stack_depth):
        self._entries = entries
        self._max_stack_depth = max_stack_depth
        self._ticks = []

    def _trace_cb(self, session, entry):
        if entry.TYPE != LogEntryType.TICK:
            return

        self._ticks.append((entry, session.resolve_tick(entry)))

    def get(self):
        session = ProfileSession(max_stack_depth=self._max_stack_depth)
        analyzer = Analyzer(self._entries, self._trace_cb, session)
        analyzer.walk()
        return self._ticks

    def dump(self, unknown_frame):
        for tick, resolved in self._ticks:
            print('tick %d (%s) pc=%#x sp=%#x' % (tick.line_number, resolved.vm_state.name,
                                                  tick.pc, tick.sp))
            for frame in resolved.frames:
                print('    %s' % format_frame(frame, unknown_frame))


class Command(LogCommand):
    """
    Prints the resolved stack of every tick in a profiler log.
    """

    help = 'Resolve the stack of every tick sample to symbol names.'

    def handle(self, *args, **options):
        settings = self.config['resolve']

        resolver = StackResolver(self.parse_log(), settings['max_stack_depth'])
        ticks = resolver.get()
        resolver.dump(settings['unknown_frame'])

        logger.success('Resolved %d ticks', len(ticks))
