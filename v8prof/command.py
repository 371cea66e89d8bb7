"""
Copyright (c) Django Software Foundation and individual contributors.
Copyright (c) Dependable Systems Laboratory, EPFL
All rights reserved.

Redistribution and use in source and binary forms, with or without modification,
are permitted provided that the following conditions are met:

    1. Redistributions of source code must retain the above copyright notice,
       this list of conditions and the following disclaimer.

    2. Redistributions in binary form must reproduce the above copyright
       notice, this list of conditions and the following disclaimer in the
       documentation and/or other materials provided with the distribution.

    3. Neither the name of Django nor the names of its contributors may be used
       to endorse or promote products derived from this software without
       specific prior written permission.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND
ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED
WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT OWNER OR CONTRIBUTORS BE LIABLE FOR
ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES
(INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON
ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT
(INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS
SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""


from abc import ABCMeta, abstractmethod
from argparse import ArgumentParser
import logging
import os
import sys

from v8prof.profile import LogEntryError, parse
from v8prof.utils import log


class CommandError(Exception):
    """
    Exception class indicating a problem while executing a command.

    If this exception is raised during the execution of a command, it will be
    caught and turned into a nicely-printed error message to the appropriate
    output stream (i.e. stderr); as a result raising this exception (with a
    sensible description of the error) is the preferred way to indicate that
    something has gone wrong in the execution of the command.
    """


class CommandParser(ArgumentParser):
    """
    Customized ``ArgumentParser`` class to improve some error messages and
    prevent SystemExit in several occasions, as SystemExit is unacceptable
    when a command is called programmatically.
    """
    def __init__(self, cmd, **kwargs):
        self._cmd = cmd
        super().__init__(**kwargs)

    def error(self, message):
        if self._cmd and self._cmd.called_from_command_line:
            super().error(message)
        else:
            raise CommandError(message)


class BaseCommand(metaclass=ABCMeta):
    """
    The base class that all commands ultimately derive from.

    This class is based on Django's ``BaseCommand`` class. The normal flow
    works as follows:

    1. ``manage.py`` loads the command class and calls its ``run_from_argv()``
       method.

    2.  The ``run_from_argv()`` method calls ``create_parser()`` to get an
        ``ArgumentParser`` for the arguments, parses them and then calls the
        ``execute()`` method, passing the parsed arguments.

    3. The ``execute`` method attemps to carry out the command by calling the
       ``handle()`` method with the parsed arguments.

    4. If ``handle()`` or ``execute()`` raises an exception (e.g.
       ``CommandError``), ``run_from_argv()`` will instead print an error
       message to ``stderr``.

    If a subclass requires additional arguments and options, these should be
    implemented in the ``add_arguments()`` method. For specifying a short
    description of the command, which will be printed in help messages, the
    ``help`` class attribute should be specified.
    """

    # Metadata about this command
    help = ''

    # Configuration shortcuts that alter various logic.
    called_from_command_line = False

    def create_parser(self, prog_name, subcommand):
        """
        Create and return the ``CommandParser`` which will be used to parse
        the arguments to this command.
        """
        parser = CommandParser(
            self, prog='%s %s' % (os.path.basename(prog_name), subcommand),
            description=self.help or None)

        # Add any arguments that all commands should accept here
        self.add_arguments(parser)

        return parser

    def add_arguments(self, parser):
        """
        Entry point for subclassed commands to add custom arguments.
        """

    def print_help(self, prog_name, subcommand):
        """
        Print the help message for this command.
        """
        parser = self.create_parser(prog_name, subcommand)
        parser.print_help()

    def run_from_argv(self, argv):
        """
        Run this command. If the command raises an ``CommandError``, intercept
        it and print it sensibly to stderr.
        """
        self.called_from_command_line = True
        parser = self.create_parser(argv[0], argv[1])

        options = parser.parse_args(argv[2:])
        cmd_options = vars(options)
        # Move positional args out of options to mimic legacy optparse
        args = cmd_options.pop('args', ())

        try:
            self.execute(*args, **cmd_options)
        except CommandError as e:
            logger = logging.getLogger(self.name)
            logger.error(e)
            sys.exit(1)

    def handle_common_args(self, **options):
        """
        Handle any common command options here and remove them from the options
        dict given to the command.
        """

    def execute(self, *args, **options):
        """
        Try to execute the command.
        """
        self.handle_common_args(**options)

        return self.handle(*args, **options)

    @property
    def name(self):
        return self.__module__.split('.')[-1]

    @abstractmethod
    def handle(self, *args, **options):
        """
        The actual logic of the command. Subclasses must implement this method.
        """
        raise NotImplementedError('subclasses of BaseCommand must provide a '
                                  'handle() method')


# pylint: disable=abstract-method
# We don't want to implement handle() in this class
class LogCommand(BaseCommand):
    """
    The base command for all commands that replay a profiler log.

    This is just a convenience class to reduce duplicate code.
    """

    def __init__(self):
        super().__init__()

        self._log_path = None
        self._config = None

    def handle_common_args(self, **options):
        """
        Loads the configuration and checks that the log file exists.
        """
        # Put import here to avoid circular dependency
        # pylint: disable=cyclic-import
        # pylint: disable=import-outside-toplevel
        from v8prof.config import load_config

        log_file = options.pop('log_file', None)
        if log_file:
            log.log_to_file(log_file)

        self._config = load_config(options.pop('config', None))

        self._log_path = options.pop('log')
        if not os.path.isfile(self._log_path):
            raise CommandError('Profiler log %s does not exist' % self._log_path)

    def add_arguments(self, parser):
        super().add_arguments(parser)

        parser.add_argument('log', help='The V8 profiler log (e.g. v8.log)')
        parser.add_argument('-c', '--config', required=False, default=None,
                            help='YAML file overriding the default settings')
        parser.add_argument('--log-file', required=False, default=None,
                            help='Write log messages to this file instead of '
                                 'the console')

    @property
    def config(self):
        """
        Get the configuration dictionary.
        """
        return self._config

    @property
    def log_path(self):
        return self._log_path

    def parse_log(self):
        """
        Parse the profiler log. Decoding errors are reported as
        ``CommandError``.
        """
        try:
            entries = parse(self._log_path)
        except LogEntryError as e:
            raise CommandError('Could not parse %s: %s' % (self._log_path, e)) from e

        if not entries:
            raise CommandError('The profiler log %s is empty' % self._log_path)

        return entries
