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

from sortedcontainers import SortedDict

from v8prof.command import LogCommand
from v8prof.profile import Analyzer, LogEntryType


logger = logging.getLogger('profile')


class TickProfiler:
    """
    Counts the ticks that landed in each symbol. The count is keyed by the
    symbol name so that code that was recompiled or moved is merged.
    """

    def __init__(self, entries, include_unknown=True):
        self._entries = entries
        self._include_unknown = include_unknown
        self._counts = SortedDict()
        self._unknown = 0
        self._total = 0

    def _trace_cb(self, session, entry):
        if entry.TYPE != LogEntryType.TICK:
            return

        symbol = session.resolve(entry.pc)
        if symbol is None:
            if not self._include_unknown:
                return
            self._unknown += 1
        else:
            self._counts[symbol.name] = self._counts.get(symbol.name, 0) + 1

        self._total += 1

    def get(self):
        analyzer = Analyzer(self._entries, self._trace_cb)
        analyzer.walk()

    @property
    def total(self):
        return self._total

    def get_profile(self):
        """
        Return ``(name, count)`` pairs, most sampled first. Unresolved ticks
        are reported with a ``None`` name.
        """
        profile = list(self._counts.items())
        if self._unknown:
            profile.append((None, self._unknown))

        return sorted(profile, key=lambda v: -v[1])

    def dump(self, top, unknown_frame):
        print('# ticks   share  symbol')

        for name, count in self.get_profile()[:top]:
            share = 100.0 * count / self._total if self._total else 0.0
            print('%7d %6.1f%%  %s' % (count, share, name if name is not None else unknown_frame))


class Command(LogCommand):
    """
    Prints a flat tick profile of a profiler log.
    """

    help = 'Generates a flat profile: ticks counted per symbol.'

    def add_arguments(self, parser):
        super().add_arguments(parser)

        parser.add_argument('-n', '--top', type=int, default=None,
                            help='Number of symbols to print. Overrides the '
                                 'profile.top setting')

    def handle(self, *args, **options):
        settings = self.config['profile']
        top = options['top'] if options['top'] is not None else settings['top']

        profiler = TickProfiler(self.parse_log(), settings['include_unknown'])
        profiler.get()
        profiler.dump(top, self.config['resolve']['unknown_frame'])

        logger.success('Profiled %d ticks', profiler.total)
