# please leave this copyright notice in binary distributions.
license = """
summon/getopt.py
part of the Summon software package
Copyright 2021-2023 by Larry Hastings
All rights reserved.

Permission is hereby granted, free of charge, to any person obtaining a
copy of this software and associated documentation files (the "Software"),
to deal in the Software without restriction, including without limitation
the rights to use, copy, modify, merge, publish, distribute, sublicense,
and/or sell copies of the Software, and to permit persons to whom the
Software is furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included
in all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT.
IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM,
DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT,
TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE
OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.
"""

import big.all as big
from big.itertools import PushbackIterator
import enum
import os.path
import sys

from . import ConfigurationError, UsageError, ErrorKind, default_converters
from . import text


class ParameterType(enum.Enum):
    """
    The kinds of value an Option accepts.
    Anything fancier should be taken as a string
    and parsed by the caller.
    """
    none = 0
    integer = 1
    string = 2
    double = 3

    def __repr__(self):
        return f"ParameterType.{self.name}"

    def __str__(self):
        return self.name.capitalize()

    @property
    def type(self):
        return _parameter_type_to_type[self]

_parameter_type_to_type = {
    ParameterType.none: None,
    ParameterType.integer: int,
    ParameterType.string: str,
    ParameterType.double: float,
    }

_invalid_value_text = {
    ParameterType.integer: "is not a valid integer",
    ParameterType.double: "is not a valid numeric value",
    }


class Option:
    """
    Describes an option GetOpt looks for on the command-line.

    An option with neither a short nor a long name is an
    "unnamed" option, a positional argument.  Unnamed options
    are required unless optional is true; named options are
    always optional.

    callback is called with the converted value when the
    option is found (None for options that take no value).
    """

    def __init__(self, short=None, long=None, description=None, parameter_type=ParameterType.none, callback=None, *, optional=None):
        if short is not None:
            if not (isinstance(short, str) and (len(short) == 1) and (short != "-")):
                raise ConfigurationError(f"short option {short!r} must be a single character")
        if long is not None:
            if not (long and isinstance(long, str)) or long.startswith("-") or ("=" in long):
                raise ConfigurationError(f"illegal long option {long!r}")
        if not isinstance(parameter_type, ParameterType):
            raise ConfigurationError(f"parameter_type must be a ParameterType, not {parameter_type!r}")
        if (callback is not None) and not callable(callback):
            raise ConfigurationError(f"callback {callback!r} isn't callable")

        self.short = short
        self.long = long
        self.description = description
        self.parameter_type = parameter_type
        self.callback = callback

        unnamed = (short is None) and (long is None)
        if optional is None:
            optional = not unnamed
        elif (not optional) and (not unnamed):
            raise ConfigurationError(f"named option {self.name!r} can't be required")
        self.optional = optional

    @classmethod
    def positional(cls, description, parameter_type=ParameterType.string, callback=None, optional=False):
        return cls(None, None, description, parameter_type, callback, optional=optional)

    def __repr__(self):
        return f"<Option short={self.short!r} long={self.long!r} {self.parameter_type!r} optional={self.optional}>"

    @property
    def unnamed(self):
        return (self.short is None) and (self.long is None)

    @property
    def takes_value(self):
        return self.parameter_type != ParameterType.none

    @property
    def name(self):
        if self.long is not None:
            return self.long
        if self.short is not None:
            return "-" + self.short
        return self.description


class GetOpt:
    """
    A declarative command-line parser.

    Declare your options up front, then call parse()
    with the command-line.  Each option found calls its
    callback with its value; positional arguments fill
    the unnamed options in order, and any extras end up
    in additional_parameters.

    Unless add_help is false, -h and --help print usage
    and exit.
    """

    def __init__(self,
        description,
        options=(),
        *,
        add_help=True,
        name=None,
        error_handler=None,
        converters=None,

        usage_max_columns = 80,
        ):
        self.description = description
        self.name = name or os.path.splitext(os.path.basename(sys.argv[0]))[0]
        self.error_handler = error_handler
        self.converters = default_converters if converters is None else converters
        self.usage_max_columns = usage_max_columns

        self.options = []
        self.short_lookup = {}
        self.long_lookup = {}
        self.unnamed = []

        self.parsed_options = -1
        self.additional_parameters = []
        self.log = big.Log()

        self.help_option = None
        for option in options:
            self.add(option)

        if add_help:
            help_option = Option('h', "help", "This help", ParameterType.none, lambda value: self.show_usage())
            self.add(help_option)
            if help_option in self.options:
                self.help_option = help_option

    def __repr__(self):
        return f"<GetOpt {self.name!r} options={len(self.options)}>"

    def duplicate(self, token):
        message = f"duplicate declaration of option '{token}'"
        self.log(f"error duplicate_declaration: {message}")
        if not self.error_handler:
            raise ConfigurationError(message, kind=ErrorKind.duplicate_declaration)
        self.error_handler(message, token)

    def add(self, option):
        """
        Adds option.  A short or long name that's already
        taken is a duplicate declaration: that raises
        ConfigurationError, or if there's an error_handler,
        calls it and ignores option.
        """
        if not isinstance(option, Option):
            raise ConfigurationError(f"{option!r} isn't an Option")
        if (option.short is not None) and (option.short in self.short_lookup):
            self.duplicate("-" + option.short)
            return self
        if (option.long is not None) and (option.long in self.long_lookup):
            self.duplicate("--" + option.long)
            return self

        # the help option stays last.
        if self.help_option:
            self.options.insert(len(self.options) - 1, option)
        else:
            self.options.append(option)

        if option.short is not None:
            self.short_lookup[option.short] = option
        if option.long is not None:
            self.long_lookup[option.long] = option
        if option.unnamed:
            self.unnamed.append(option)
        return self

    ##
    ## fluent interface
    ##

    @classmethod
    def describe(cls, description, **kwargs):
        return cls(description, **kwargs)

    def flag(self, short, long, callback=None, description=None):
        if callback is None:
            wrapper = None
        else:
            def wrapper(value):
                callback()
        return self.add(Option(short, long, description, ParameterType.none, wrapper))

    def parameter(self, short, long, callback=None, parameter_type=ParameterType.string, description=None):
        if parameter_type == ParameterType.none:
            raise ConfigurationError("a parameter must take a value, use flag() instead")
        return self.add(Option(short, long, description, parameter_type, callback))

    def argument(self, callback=None, description=None, parameter_type=ParameterType.string, optional=False):
        return self.add(Option.positional(description, parameter_type, callback, optional))

    ##
    ## parsing
    ##

    def convert(self, option, value):
        if option.parameter_type == ParameterType.string:
            return value
        try:
            return self.converters.convert(option.parameter_type.type, value)
        except Exception:
            raise UsageError(f"Option '{option.name}': '{value}' {_invalid_value_text[option.parameter_type]}", value, kind=ErrorKind.conversion) from None

    def dispatch(self, option, iterator, inline_value=None):
        """
        Finds the value for option (if it takes one),
        converts it, and calls option's callback.
        """
        value = None
        if option.takes_value:
            if inline_value is None:
                inline_value = next(iterator, None)
                if inline_value is None:
                    raise UsageError(f"Option '{option.long or option.short}' requires a parameter", option.name, kind=ErrorKind.missing_value)
            value = self.convert(option, inline_value)
        self.log(f"{option.name} -> {value!r}")
        if option.callback:
            option.callback(value)

    def _parse(self, args):
        iterator = PushbackIterator(args)
        unnamed = iter(self.unnamed)
        unnamed_count = 0
        force_positional = False

        for a in iterator:
            if force_positional or (not a.startswith("-")) or (a == "-"):
                option = next(unnamed, None)
                if option is None:
                    self.additional_parameters.append(a)
                    continue
                unnamed_count += 1
                self.dispatch(option, iterator, a)
                continue

            if a == "--":
                force_positional = True
                continue

            option_text, equals, value = a.partition("=")
            inline_value = value if equals else None

            if a.startswith("--"):
                option = self.long_lookup.get(option_text[2:])
                if not option:
                    raise UsageError(f"Unknown option '{a}'", a, kind=ErrorKind.unknown_option)
                self.dispatch(option, iterator, inline_value)
                continue

            # "-abc" is exactly equivalent to "-a -bc".  Handle the
            # first letter, then push the rest back onto the iterator.
            if len(option_text) < 2:
                raise UsageError(f"Unknown option '{a}'", a, kind=ErrorKind.unknown_option)
            letter = option_text[1]
            option = self.short_lookup.get(letter)
            if not option:
                raise UsageError(f"Unknown option '{letter}'", a, kind=ErrorKind.unknown_option)

            remainder = option_text[2:]
            if remainder:
                if option.takes_value:
                    # only the last short option may take a value
                    raise UsageError(f"Option '{letter}' requires a parameter", a, kind=ErrorKind.missing_value)
                iterator.push("-" + remainder + equals + value)
                inline_value = None
            self.dispatch(option, iterator, inline_value)

        required = sum(1 for option in self.unnamed if not option.optional)
        if unnamed_count < required:
            raise UsageError("Missing parameters", "", kind=ErrorKind.missing_required_positional)

    def parse(self, args, *, exit_on_error=False):
        """
        Parses the command-line "args".

        Returns the number of arguments processed, which
        is also stored in parsed_options.

        Errors raise UsageError, unless an error_handler
        was supplied, in which case it's called with
        (message, token) and parse returns -1.  If
        exit_on_error is true, errors are printed and
        the program exits.
        """
        args = list(args)
        self.log = big.Log()
        self.log(f"parse start, {len(args)} arguments")
        self.parsed_options = -1
        self.additional_parameters = []
        try:
            self._parse(args)
        except UsageError as e:
            self.log(f"error {e.kind.name if e.kind else 'unknown'}: {e.message}")
            if exit_on_error:
                print(f"Error: {e.message}")
                sys.exit(1)
            if not self.error_handler:
                raise
            self.error_handler(e.message, e.token)
            return -1

        self.parsed_options = len(args)
        self.log("parse complete")
        return self.parsed_options

    ##
    ## usage
    ##

    def usage(self):
        """
        Returns the usage text: the description, a
        one-line summary, then a row for every named option.
        """
        lines = []
        if self.description is not None:
            lines.append(self.description)

        usage = ["Usage:", self.name]

        # first, options without parameters
        short_flags = "".join(o.short for o in self.options if (o.short is not None) and not o.takes_value)
        if short_flags:
            usage.append("-" + short_flags)

        # then, options with parameters
        for option in self.options:
            if (option.short is not None) and option.takes_value:
                usage.append(f"-{option.short} <{option.long or option.parameter_type!s}>")

        # then, options that only have long names
        for option in self.options:
            if (option.short is None) and (option.long is not None):
                if option.takes_value:
                    usage.append(f"--{option.long} <{option.parameter_type!s}>")
                else:
                    usage.append(f"--{option.long}")

        # finally, the unnamed options
        for option in self.unnamed:
            if option.description is not None:
                if option.optional:
                    usage.append(f"[{option.description}]")
                else:
                    usage.append(f"<{option.description}>")

        lines.append(" ".join(usage))

        rows = []
        for option in self.options:
            if option.unnamed:
                continue
            left = [f"-{option.short}" if option.short is not None else "  "]
            if option.long is not None:
                left.append(f"--{option.long}")
            if option.takes_value:
                left.append(f"<{option.parameter_type!s}>")
            rows.append((" ".join(left), option.description or ""))

        if rows:
            lines.append("Options:")
            lines.append(text.format_rows(rows, indent=1, max_columns=self.usage_max_columns))

        return "\n".join(lines)

    def show_usage(self, exit=True):
        print(self.usage())
        if exit:
            sys.exit(0)
