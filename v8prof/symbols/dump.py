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

from v8prof.utils.templates import render_template

logger = logging.getLogger('symbols')


def export_rows(table):
    """
    Return the ``(name, start_hex, length)`` triples of every symbol in the
    table, in ascending address order.
    """
    return [(sym.name, '%x' % sym.address, sym.length) for sym in table]


def dump_text(table):
    lines = []
    for sym in table:
        lines.append('%#018x %8d %-20s %s' % (sym.address, sym.length, sym.kind.name, sym.name))
    return '\n'.join(lines)


def dump_html(table, output_path=None):
    """
    Render the symbol table as an HTML table. This is only meant for
    debugging.
    """
    context = {
        'rows': export_rows(table),
    }

    return render_template(context, 'symbol_table.html', output_path)


def log_table(table):
    logger.info('Dumping symbol table')
    for sym in table:
        logger.info('%s kind=%s', sym, sym.kind.name)
    logger.info('Dumping symbol table done')
