#!/usr/bin/env python3

"Command-line parsing without configuration.  Just summon the arguments you need."
__version__ = "0.3.1"


# please leave this copyright notice in binary distributions.
license = """
summon/__init__.py
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
import collections
import enum
import os.path
import sys

from . import text


class SummonBaseException(Exception):
    pass

class ConfigurationError(SummonBaseException):
    """
    Raised when the Summon API is used improperly.

    "kind" is the ErrorKind of the failure, if it has one.
    """
    def __init__(self, message, *, kind=None):
        super().__init__(message)
        self.message = message
        self.kind = kind


class UsageError(SummonBaseException):
    """
    Raised when Summon processes an invalid command-line.

    "kind" is the ErrorKind of the failure (if known),
    "token" is the command-line argument at fault
    (an empty string if there isn't one).
    """
    def __init__(self, message, token='', *, kind=None):
        super().__init__(message)
        self.message = message
        self.token = token
        self.kind = kind


class ErrorKind(enum.Enum):
    ambiguous_order = 1
    missing_argument = 2
    missing_value = 3
    conversion = 4
    unknown_option = 5
    duplicate_declaration = 6
    missing_required_positional = 7

    def __repr__(self):
        return f"ErrorKind.{self.name}"


##
## Error handlers.
##
## An error handler is any callable accepting (message, token).
## If it returns, whatever query failed yields its default.
##

def exit_with_error(message, token, *, name=None):
    name = name or os.path.basename(sys.argv[0])
    print(f"Error in {name}:", file=sys.stderr)
    print(message, file=sys.stderr)
    sys.exit(-1)

def raise_usage_error(message, token):
    raise UsageError(message, token)


##
## Options are named internally in a "normalized" format:
##
##     * short names are the single character (e.g. "v").
##     * long names are the name without the dashes (e.g. "verbose").
##
## normalize_names() accepts a lone name in either slot,
## with or without its dashes.
##
def normalize_names(short, long):
    if short is not None:
        if not (short and isinstance(short, str)):
            raise ConfigurationError(f"illegal option name {short!r}")
        stripped = short.lstrip('-')
        if (long is None) and (short.startswith("--") or (len(stripped) > 1)):
            short, long = None, stripped
        elif len(stripped) != 1:
            raise ConfigurationError(f"short option {short!r} must be a single character")
        else:
            short = stripped
    if long is not None:
        if not (long and isinstance(long, str)):
            raise ConfigurationError(f"illegal option name {long!r}")
        long = long.lstrip('-')
        if not long:
            raise ConfigurationError("long option name can't be only dashes")
    if (short is None) and (long is None):
        raise ConfigurationError("an option needs a short name, a long name, or both")
    return short, long

def denormalize_names(short, long):
    options = []
    if short:
        options.append("-" + short)
    if long:
        options.append("--" + long)
    return options


##
## Converters turn the text of a command-line argument
## into a value of a particular type.
##

def parse_bool(s):
    folded = s.strip().lower()
    if folded in ("1", "true", "yes", "on", "y", "t"):
        return True
    if folded in ("0", "false", "no", "off", "n", "f"):
        return False
    raise ValueError(f"invalid boolean {s!r}")


class Converters:
    """
    A registry mapping a type to the function that
    converts strings into that type, plus the name
    used for that type in usage text.

    Types nobody registered are converted by calling
    the type itself with the string.
    """
    def __init__(self):
        self.functions = {}
        self.names = {}

    def __repr__(self):
        return f"<Converters {list(self.names.values())}>"

    def __contains__(self, type):
        return type in self.functions

    def register(self, type, function=None, *, name=None):
        if not callable(type):
            raise ConfigurationError(f"can't register converter for {type!r}, it isn't callable")
        if function is None:
            function = type
        if not callable(function):
            raise ConfigurationError(f"converter for {type!r} isn't callable")
        self.functions[type] = function
        self.names[type] = name or getattr(type, '__name__', None) or repr(type)
        return function

    def convert(self, type, s):
        function = self.functions.get(type, type)
        return function(s)

    def usage_name(self, type):
        name = self.names.get(type)
        if name:
            return name
        return getattr(type, '__name__', None) or repr(type)


default_converters = converters = Converters()
converters.register(str, name="String")
converters.register(int, name="Integer")
converters.register(float, name="Double")
converters.register(bool, parse_bool, name="Boolean")


def is_combined_short_options(s, *, allow_equals=False):
    """
    Returns true if s looks like several short options
    glued together ("-abc").  If allow_equals is false,
    "-p=value" doesn't count.
    """
    return (
        (len(s) > 2)
        and s.startswith("-")
        and (s[1] != "-")
        and (allow_equals or ("=" not in s))
        )


class TokenPool:
    """
    The command-line arguments that haven't been consumed yet.

    "tokens" is the list of raw arguments in command-line order.
    Tokens are only ever removed from it.

    "pure" holds every argument after a literal "--".
    Those are only available as positional arguments.

    "flags" is the set of single-character flags found by
    exploding combined short options ("-abc").
    """

    def __init__(self, tokens=(), *, allow_short_equals=True):
        self.tokens = list(tokens)
        self.pure = collections.deque()
        self.flags = set()

        if "--" in self.tokens:
            double_dash = self.tokens.index("--")
            self.pure.extend(self.tokens[double_dash + 1:])
            del self.tokens[double_dash:]

        # "-p=value" is a parameter with an inline value, not combined flags.
        # So while short inline values are on, "-vx=1" isn't exploded either.
        def combined(s):
            return is_combined_short_options(s, allow_equals=not allow_short_equals)

        index = self.index(combined)
        while index != -1:
            self.flags.update(self.tokens[index][1:])
            self.remove(index)
            index = self.index(combined)

    def __repr__(self):
        return f"<TokenPool tokens={self.tokens!r} pure={list(self.pure)!r} flags={''.join(sorted(self.flags))!r}>"

    def __len__(self):
        return len(self.tokens)

    def __bool__(self):
        return bool(self.tokens) or bool(self.pure)

    def __iter__(self):
        return iter(self.tokens)

    def __getitem__(self, index):
        return self.tokens[index]

    def index(self, predicate):
        for i, token in enumerate(self.tokens):
            if predicate(token):
                return i
        return -1

    def remove(self, index, count=1):
        del self.tokens[index:index + count]

    def remove_all(self, predicate):
        before = len(self.tokens)
        self.tokens = [token for token in self.tokens if not predicate(token)]
        return before - len(self.tokens)

    def next_pure(self, default=None):
        if not self.pure:
            return default
        return self.pure.popleft()


class Query(enum.Enum):
    flag = 1
    parameter = 2
    argument = 3

    def __repr__(self):
        return f"Query.{self.name}"


class QueryRecord:
    """
    One query made against an Args object.  "kind" says
    which of the fields mean anything:

        flag       short, long, value (a bool)
        parameter  short, long, value, type
        argument   name, value, has_default

    "description" is optional for all three.
    """

    def __init__(self, kind, *, short=None, long=None, value=None, type=None, has_default=False, name=None, description=None):
        self.kind = kind
        self.short = short
        self.long = long
        self.value = value
        self.type = type
        self.has_default = has_default
        self.name = name
        self.description = description

    def __repr__(self):
        return f"<QueryRecord {self.kind.name} short={self.short!r} long={self.long!r} value={self.value!r}>"

    @property
    def identity(self):
        return (self.kind, self.short, self.long)

    @property
    def sort_key(self):
        if self.kind == Query.flag:
            return 0 if self.short else 1
        if self.kind == Query.parameter:
            return 2 if self.short else 3
        return 4

    def matches(self, short, long):
        return (
            (bool(short) and (self.short == short))
            or (bool(long) and (self.long == long))
            )


class Deferred:
    """
    A value computed the first time somebody asks for it.

    Force it with .value, or by calling it.  The
    computation runs exactly once; after that the
    result is cached.
    """

    def __init__(self, fn):
        self.fn = fn
        self.evaluated = False
        self._value = None

    def __repr__(self):
        if self.evaluated:
            return f"<Deferred value={self._value!r}>"
        return "<Deferred (unevaluated)>"

    @property
    def value(self):
        if not self.evaluated:
            self._value = self.fn()
            self.evaluated = True
            self.fn = None
        return self._value

    def __call__(self):
        return self.value


_missing = object()


class Args:
    """
    A no-configuration command-line parser.

    There's no parse phase.  You ask for what you want,
    when you want it:

        args = summon.Args()
        source = args.next()
        verbose = args.flag('v', 'verbose')
        count = args.get('n', 'count', 100)
        print(source.value)

    Each query consumes the arguments it matched, so later
    queries never see them.  Positional arguments are
    resolved lazily (see next()), so you can ask for them
    before you've asked for the flags that precede them.
    """

    def __init__(self,
        arguments=None,
        *,
        name=None,
        error_handler=None,
        converters=None,

        short_option_equals_value = True,       # -p=VALUE
        long_option_equals_value = True,        # --param=VALUE

        usage_max_columns = 80,
        ):
        self.name = name or os.path.basename(sys.argv[0])
        self.error_handler = error_handler or self.exit_with_error
        self.converters = default_converters if converters is None else converters

        self.short_option_equals_value = short_option_equals_value
        self.long_option_equals_value = long_option_equals_value
        self.usage_max_columns = usage_max_columns

        if arguments is None:
            arguments = sys.argv[1:]
        self.reset(arguments)

    def __repr__(self):
        return f"<Args {self.name!r} pool={self.pool!r}>"

    def reset(self, arguments):
        """
        Replace the command-line with "arguments".

        Discards everything learned about the old
        command-line: the pool, the flag cache, the
        query history, the errors, and the log.
        """
        self.pool = TokenPool(arguments, allow_short_equals=self.short_option_equals_value)
        self.records = []
        self.errors = []
        self.log = big.Log()
        self.log(f"reset, {len(self.pool)} arguments, {len(self.pool.pure)} pure arguments")

    def exit_with_error(self, message, token):
        exit_with_error(message, token, name=self.name)

    def set_error_handler(self, handler):
        if not callable(handler):
            raise ConfigurationError(f"error handler {handler!r} isn't callable")
        self.error_handler = handler

    def error(self, kind, message, token=''):
        self.errors.append((kind, message, token))
        self.log(f"error {kind.name}: {message}")
        self.error_handler(message, token)

    def _find_flag(self, short, long):
        for record in self.records:
            if (record.kind == Query.flag) and record.matches(short, long):
                return record
        return None

    def flag(self, short=None, long=None, *, description=None):
        """
        Returns True if the flag is on the command-line.

        Accepts "-v", "--verbose", or "-v" as part of
        combined short options ("-xvz").  Asking about the
        same flag again returns the same answer.
        """
        short, long = normalize_names(short, long)

        record = self._find_flag(short, long)
        if record:
            return record.value

        if short and (short in self.pool.flags):
            found = True
        else:
            options = denormalize_names(short, long)
            found = bool(self.pool.remove_all(lambda token: token in options))

        self.records.append(QueryRecord(Query.flag, short=short, long=long, value=found, description=description))
        self.log(f"flag {'|'.join(denormalize_names(short, long))} -> {found}")
        return found

    def _find_parameter(self, short, long):
        """
        Returns (index, inline_value) of the first token
        naming this parameter, or (-1, None).
        """
        prefixes = []
        if short:
            prefixes.append(("-" + short, self.short_option_equals_value))
        if long:
            prefixes.append(("--" + long, self.long_option_equals_value))

        for i, token in enumerate(self.pool):
            for option, allow_equals in prefixes:
                if token == option:
                    return i, None
                if allow_equals and token.startswith(option + "="):
                    return i, token[len(option) + 1:]
        return -1, None

    def get(self, short=None, long=None, default=None, *, type=None, description=None):
        """
        Returns the value of a parameter ("-p VALUE",
        "--param VALUE", "-p=VALUE", or "--param=VALUE"),
        converted to "type".

        If type isn't specified, it's inferred from
        default; if default is None, it's str.

        If the parameter isn't on the command-line,
        returns default.  If it appears more than once,
        each call returns the next one.
        """
        short, long = normalize_names(short, long)
        if type is None:
            if (default is None) or (default is _missing):
                type = str
            else:
                type = default.__class__

        record = QueryRecord(Query.parameter, short=short, long=long, value=None if default is _missing else default, type=type, description=description)
        self.records.append(record)
        printable = '|'.join(denormalize_names(short, long))

        index, inline_value = self._find_parameter(short, long)
        if index == -1:
            self.log(f"parameter {printable} not found")
            return default

        token = self.pool[index]
        if inline_value is not None:
            s = inline_value
            count = 1
        elif (index + 1) >= len(self.pool):
            self.error(ErrorKind.missing_value, f"Missing parameter value after '{token}'", token)
            return default
        else:
            s = self.pool[index + 1]
            count = 2

        try:
            value = self.converters.convert(type, s)
        except Exception:
            self.error(ErrorKind.conversion, f"Invalid value {s!r} for '{printable}', must be {self.converters.usage_name(type)}", s)
            return default

        self.pool.remove(index, count)
        record.value = value
        self.log(f"parameter {printable} -> {value!r}")
        return value

    def get_all(self, short=None, long=None, *, type=None, description=None):
        """
        Returns a list of every value of a parameter,
        in command-line order.  Stops at the first miss.
        """
        values = []
        while True:
            value = self.get(short, long, _missing, type=type, description=description)
            if value is _missing:
                break
            values.append(value)
        return values

    def _next(self, record, default):
        self.log.enter(f"resolve {record.name}")
        try:
            value = self._scan_for_argument(record, default)
        finally:
            self.log.exit()
        record.value = value
        return value

    def _scan_for_argument(self, record, default):
        last_was_flag = False
        for i, token in enumerate(self.pool):
            if token.startswith("-"):
                last_was_flag = True
            elif last_was_flag:
                # "-f hello": we can't tell whether "hello" is the value
                # of -f or an argument until somebody asks about -f.
                self.error(ErrorKind.ambiguous_order, f"ambiguous parameter order: is {token!r} an argument or the value of {self.pool[i - 1]!r}?", token)
                value = None if default is _missing else default
                break
            else:
                self.pool.remove(i)
                value = token
                break
        else:
            value = self.pool.next_pure(_missing)
            if value is _missing:
                if default is _missing:
                    self.error(ErrorKind.missing_argument, f"Argument missing: {record.name}", "")
                    value = None
                else:
                    value = default
        self.log(f"{record.name} -> {value!r}")
        return value

    def next(self, default=_missing, *, name="argument", description=None):
        """
        Returns the next positional argument, as a Deferred.

        The argument isn't chosen until the Deferred is
        forced.  By then you've probably asked about the
        flags and parameters on the command-line, which
        removes them (and their values) from consideration.

        If there are no arguments left, the Deferred
        evaluates to default.  If you didn't supply one,
        that's an error.
        """
        has_default = default is not _missing
        record = QueryRecord(Query.argument, name=name, value=default if has_default else None, has_default=has_default, description=description)
        self.records.append(record)
        self.log(f"next {name}")
        return Deferred(lambda: self._next(record, default))

    def _usage_records(self):
        seen = set()
        records = []
        for record in sorted(self.records, key=lambda r: r.sort_key):
            if record.kind != Query.argument:
                identity = record.identity
                if identity in seen:
                    continue
                seen.add(identity)
            records.append(record)
        return records

    def usage(self):
        """
        Returns usage text built from the queries made so far.

        The first line is the summary: short flags, long
        flags, short parameters, long parameters, then
        positional arguments in the order they were asked for.
        Descriptions, if any, follow, one row per query.
        """
        records = self._usage_records()
        usage = [self.name]

        short_flags = "".join(r.short for r in records if r.sort_key == 0)
        if short_flags:
            usage.append("-" + short_flags)

        rows = []
        for record in records:
            if record.kind == Query.flag:
                if not record.short:
                    usage.append("--" + record.long)
                left = "|".join(denormalize_names(record.short, record.long))
            elif record.kind == Query.parameter:
                type_name = self.converters.usage_name(record.type)
                option = ("-" + record.short) if record.short else ("--" + record.long)
                usage.append(f"{option} <{type_name}>")
                left = "|".join(denormalize_names(record.short, record.long)) + f" <{type_name}>"
            else:
                if record.has_default:
                    left = f"[{record.name}]"
                else:
                    left = f"<{record.name}>"
                usage.append(left)
            if record.description:
                rows.append((left, record.description))

        summary = " ".join(usage)
        if not rows:
            return summary
        return summary + "\n\n" + text.format_rows(rows, max_columns=self.usage_max_columns)

    def print_usage(self):
        print("usage:", self.usage())


##
## The process-wide Args object, for programs that
## would rather not pass one around.
##

_default_args = None

def default_args():
    global _default_args
    if _default_args is None:
        _default_args = Args()
    return _default_args

def set_arguments(*arguments):
    """
    Replace the process-wide command-line.  Mainly for testing.
    """
    args = default_args()
    args.reset(arguments)
    return args

def set_error_handler(handler):
    default_args().set_error_handler(handler)

def flag(short=None, long=None, *, description=None):
    return default_args().flag(short, long, description=description)

def get(short=None, long=None, default=None, *, type=None, description=None):
    return default_args().get(short, long, default, type=type, description=description)

def get_all(short=None, long=None, *, type=None, description=None):
    return default_args().get_all(short, long, type=type, description=description)

def next_argument(default=_missing, *, name="argument", description=None):
    return default_args().next(default, name=name, description=description)

def usage():
    return default_args().usage()
