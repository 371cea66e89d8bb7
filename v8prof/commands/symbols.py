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
from v8prof.profile import Analyzer
from v8prof.symbols.dump import dump_html, dump_text, log_table


logger = logging.getLogger('symbols')


class Command(LogCommand):
    """
    Replays a profiler log and dumps the code that is still live at the end.
    """

    help = 'Dump the symbol table left after replaying a profiler log.'

    def add_arguments(self, parser):
        super().add_arguments(parser)

        parser.add_argument('--html', required=False, default=None,
                            help='Write the symbol table as an HTML table to '
                                 'this file instead of printing it')
        parser.add_argument('--to-log', action='store_true', dest='to_log',
                            help='Write the symbol table to the log instead '
                                 'of printing it')

    def handle(self, *args, **options):
        session = Analyzer(self.parse_log()).walk()
        symbols = session.symbols

        if options['html']:
            dump_html(symbols, options['html'])
            logger.success('Symbol table saved to %s', options['html'])
        elif options['to_log']:
            log_table(symbols)
        else:
            print(dump_text(symbols))
            logger.success('%d live symbols', len(symbols))
