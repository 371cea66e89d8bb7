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


class AddressTag:
    """
    Stores the last address decoded for one kind of log field. Compressed
    logs write most addresses as a delta from this address.
    """

    __slots__ = 'name', 'prev_address'

    def __init__(self, name):
        self.name = name
        self.prev_address = 0

    def decode(self, text):
        """
        Decode an absolute hex address (``0x1a2b`` or ``1a2b``) or a signed
        hex delta (``+1a0``, ``-20``) and remember the result.
        """
        text = text.strip()
        if text[:1] in ('+', '-'):
            address = self.prev_address + int(text, 16)
        else:
            address = int(text, 16)

        if address < 0:
            raise ValueError('Address field %r of %s decodes to a negative address' % (text, self.name))

        self.prev_address = address
        return address

    def __str__(self):
        return '%s=%#x' % (self.name, self.prev_address)


class AddressDecodeContext:
    """
    One ``AddressTag`` per log field kind, created on first use.
    """

    def __init__(self):
        self._tags = {}

    def tag(self, name):
        tag = self._tags.get(name)
        if tag is None:
            tag = AddressTag(name)
            self._tags[name] = tag
        return tag

    def decode(self, name, text):
        return self.tag(name).decode(text)

    def reset(self):
        self._tags = {}
