"""
This library provides a number of low-level utilities.
"""
import sys
from typing import Any, Callable, Optional

import click

# Types for function references.
Echo = Callable[[str, Any], None]

# This is a function reference to facilitate unit testing.
_echo = click.secho


class GlobalOptions(object):
    """
    A class that holds all our global information.  This consists of the command
    line options specified by the user.
    """
    def __init__(self):
        self._quiet = False
        self._verbose = 0
        self._force_remote_fetch = False
        self._ignore_cache = False

    def set_quiet(self, value: bool) -> 'GlobalOptions':
        """
        This function sets whether or not the user has requested quiet operation.
        If this is ``True``, normal output will be suppressed.

        :param value: whether or not quiet mode is in force.
        :return: this object, for fluency.
        """
        self._quiet = value
        return self

    def set_verbose(self, value: int) -> 'GlobalOptions':
        """
        This function sets the count of how many times the user specified the verbose
        option.  The higher the number, the more verbose the output.

        :param value: the number indicating verbosity.  Zero means no verbosity.
        :return: this object, for fluency.
        """
        self._verbose = value
        return self

    def set_force_remote_fetch(self, value: bool) -> 'GlobalOptions':
        """
        This function sets whether or not the user is requesting that descriptors be
        fetched from the remote repository, even if they are already in the local one.

        :param value: whether or not descriptors should always be fetched.
        :return: this object, for fluency.
        """
        self._force_remote_fetch = value
        return self

    def set_ignore_cache(self, value: bool) -> 'GlobalOptions':
        """
        This function sets whether or not the user is requesting that any cached
        dependency resolution be ignored for this run.  The cache is still written.

        :param value: whether or not the resolution cache should be bypassed.
        :return: this object, for fluency.
        """
        self._ignore_cache = value
        return self

    def quiet(self) -> bool:
        """
        This function returns whether or not the user has requested quiet operation.

        :return: whether or not quiet mode is in force.
        """
        return self._quiet

    def verbose(self) -> int:
        """
        This function returns a count of how many times the user specified the verbose
        option.

        :return: a number indicating verbosity.  Zero means no verbosity.
        """
        return self._verbose

    def force_remote_fetch(self) -> bool:
        """
        This function returns whether or not the user has requested that descriptors be
        fetched from the remote repository even when a local copy exists.

        :return: whether or not descriptors should always be fetched.
        """
        return self._force_remote_fetch

    def ignore_cache(self) -> bool:
        """
        This function returns whether or not the resolution cache should be bypassed.

        :return: whether or not cached resolutions should be ignored.
        """
        return self._ignore_cache


def out(text: str = '', respect_quiet: bool = True, **kwargs):
    """
    This function is a thin wrapper around ``click.secho`` and will only output the given
    information if the user says it's ok.

    :param text: the text to print out.
    :param respect_quiet: a flag noting whether the ``quiet`` attribute of global options
    should be respected.  If this is ``False``, text will always be output.
    """
    if not (global_options.quiet() and respect_quiet):
        _echo(text, **kwargs)


def verbose_out(text, **kwargs):
    """
    This function is a thin wrapper around ``click.secho`` and will only output the given
    information if the user says it's ok via the verbose attribute of the global options.

    :param text: the text to print out.
    """
    if global_options.verbose() > 0:
        if 'fg' not in kwargs:
            kwargs['fg'] = 'green'
        _echo(text, **kwargs)


def labeled_out(text, label: Optional[str] = None, respect_quiet: bool = True, **kwargs):
    """
    This function is a thin wrapper around ``out`` and will only output the given
    information if the user says it's ok.  If a label is provided, it is prepended to
    the given text.

    :param text: the text to print out.
    :param label: the label, if any, to prepend to the text.
    :param respect_quiet: a flag noting whether the ``quiet`` attribute of global options
    should be respected.
    """
    if label:
        text = f'{label}: {text}'
    out(text, respect_quiet, **kwargs)


def warn(text, label: Optional[str] = 'Warning'):
    """
    This function is a thin wrapper around ``labeled_out``.  If a label is not provided,
    it defaults to `Warning'.  Output will occur regardless of the ``quiet`` attribute
    of the global options.

    :param text: the text to print out.
    :param label: the label, if any, to prepend to the text.
    """
    labeled_out(text, label, respect_quiet=False, fg='yellow')


def end(*args, label: str = 'ERROR', rc=1):
    """
    A function to print messages to the end user as errors and exit.  Each line of
    output will be prepended with the given label, which defaults to ``ERROR`` if it
    is not specified.

    :param args: the list of lines to print out.
    :param label: the label, if any, to prepend to the text.
    :param rc: the return code to exit with.  This will default to ``1`` if not specified.
    """
    for line in args:
        labeled_out(line, label, respect_quiet=False, fg='bright_red')
    sys.exit(rc)


def set_echo(echo: Optional[Echo] = None):
    global _echo
    _echo = echo or click.secho


global_options = GlobalOptions()
