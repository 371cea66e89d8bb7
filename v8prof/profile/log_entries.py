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


from enum import Enum


class LogEntryType(Enum):
    """
    The entries of a V8 profiler log that take part in symbol resolution.
    """

    CODE_CREATION = 0
    CODE_MOVE = 1
    CODE_DELETE = 2
    TICK = 3


class VMState(Enum):
    """
    What the virtual machine was doing when a tick was sampled.
    """

    JS = 0
    GC = 1
    COMPILER = 2
    OTHER = 3
    EXTERNAL = 4

    @classmethod
    def from_value(cls, value):
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class LogEntryError(Exception):
    """
    A log line could not be decoded.
    """

    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = 'line %d: %s' % (line_number, message)
        super().__init__(message)
        self.line_number = line_number


class LogEntry:
    """
    Abstract log entry class. Addresses held by entries are always absolute.
    """

    TYPE = None

    __slots__ = ('line_number',)

    def __init__(self, line_number=None):
        self.line_number = line_number

    def as_dict(self):
        """
        Get a dictionary representation of the log entry.

        This method should be overwritten.
        """
        return {}

    def __str__(self):
        return '%s(%s)' % (self.__class__.__name__,
                           ', '.join('%s=%s' % (key, value) for key, value in self.as_dict().items()))


class CodeCreation(LogEntry):
    TYPE = LogEntryType.CODE_CREATION

    __slots__ = 'kind', 'address', 'length', 'name'

    def __init__(self, kind, address, length, name, line_number=None):
        super().__init__(line_number)
        self.kind = kind
        self.address = address
        self.length = length
        self.name = name

    def as_dict(self):
        return {
            'kind': self.kind.name,
            'address': '%#x' % self.address,
            'length': self.length,
            'name': self.name,
        }


class CodeMove(LogEntry):
    TYPE = LogEntryType.CODE_MOVE

    __slots__ = 'from_address', 'to_address'

    def __init__(self, from_address, to_address, line_number=None):
        super().__init__(line_number)
        self.from_address = from_address
        self.to_address = to_address

    def as_dict(self):
        return {
            'from_address': '%#x' % self.from_address,
            'to_address': '%#x' % self.to_address,
        }


class CodeDelete(LogEntry):
    TYPE = LogEntryType.CODE_DELETE

    __slots__ = ('address',)

    def __init__(self, address, line_number=None):
        super().__init__(line_number)
        self.address = address

    def as_dict(self):
        return {
            'address': '%#x' % self.address,
        }


class Tick(LogEntry):
    """
    A stack sample. ``stack`` holds the return addresses found on the stack,
    innermost first, not including ``pc``.
    """

    TYPE = LogEntryType.TICK

    __slots__ = 'pc', 'sp', 'vm_state', 'stack'

    def __init__(self, pc, sp, vm_state, stack=None, line_number=None):
        super().__init__(line_number)
        self.pc = pc
        self.sp = sp
        self.vm_state = vm_state
        self.stack = stack or []

    def as_dict(self):
        return {
            'pc': '%#x' % self.pc,
            'sp': '%#x' % self.sp,
            'vm_state': self.vm_state.name,
            'stack': ['%#x' % addr for addr in self.stack],
        }
