import operator

# please leave this copyright notice in binary distributions.
license = """
summon/text.py
part of the Summon software package
Copyright 2021 by Larry Hastings
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


def presplit_textwrap(words, margin=79, *, two_spaces=True):
    """
    Joins "words" into lines no longer than "margin"
    (unless a single word is longer) and returns the
    result as a string.

    If "two_spaces" is true, words that end in sentence-ending
    punctuation ('.', '?', and '!') are followed by two spaces.
    """
    col = 0
    lastword = ''
    lines = []

    for word in words:
        if two_spaces and lastword.endswith(('.', '?', '!')):
            space = "  "
        else:
            space = " "

        if col and ((col + len(space) + len(word)) > margin):
            lines.append('\n')
            col = 0
        elif col:
            lines.append(space)
            col += len(space)

        lines.append(word)
        col += len(word)
        lastword = word

    return "".join(lines)


def _max_line_length(lines):
    return max(len(line) for line in lines)


def merge_columns(*blobs, column_spacing=1):
    """
    Merges blobs of text side by side, each blob
    getting its own column.

    Each blob is a tuple of (text, min_width, max_width).
    A column is as wide as its longest line plus
    column_spacing, clamped to [min_width, max_width].

    If a column has a line wider than max_width, the
    columns to its right wait until after the last
    such line.  That's how a long option name pushes
    its description down to the next line:

        -o|--a-really-long-option
                      Its description.

    Trailing whitespace is stripped from every line.
    """
    columns = []
    widths = []
    last_too_wide_lines = []

    for s, min_width, max_width in blobs:
        assert isinstance(s, str)
        operator.index(min_width)
        operator.index(max_width)

        lines = s.rstrip().split('\n')
        columns.append(lines)

        measured_width = _max_line_length(lines) + column_spacing
        widths.append(min(max_width, max(min_width, measured_width)))

        last_too_wide_line = -1
        if measured_width > max_width:
            for i, line in enumerate(lines):
                if len(line) >= max_width:
                    last_too_wide_line = i
        last_too_wide_lines.append(last_too_wide_line)

    # each column is a queue of lines; the columns to the right
    # of a too-wide line are held back until it's been emitted.
    iterators = [iter(enumerate(c)) for c in columns]
    output = []

    while True:
        line = []
        exhausted = True
        for iterator, width, last_too_wide_line in zip(iterators, widths, last_too_wide_lines):
            i, column = next(iterator, (None, None))
            if column is None:
                line.append(" " * width)
                continue
            exhausted = False
            if i <= last_too_wide_line:
                line.append(column)
                break
            line.append(column.ljust(width))
        if exhausted:
            break
        output.append("".join(line).rstrip())

    return "\n".join(output).rstrip()


def format_rows(rows, *, indent=2, max_columns=80, max_left_width=30):
    """
    Formats (left, right) pairs of text as aligned rows.
    Used for the option/argument definitions in usage text.

    The left column is as wide as the widest left text
    (up to max_left_width); the right text is wrapped to
    fit in what's left of max_columns.
    """
    if not rows:
        return ""
    left_width = min(max_left_width, max(len(left) for left, right in rows) + 2)
    right_width = max(max_columns - indent - left_width, 20)

    formatted = []
    for left, right in rows:
        right = presplit_textwrap((right or "").split(), margin=right_width)
        formatted.append(merge_columns(
            ("", indent, indent),
            (left, left_width, left_width),
            (right, 0, right_width),
            ))
    return "\n".join(formatted)


