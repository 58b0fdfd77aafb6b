
# part of the Summon software package
# Copyright 2021-2023 by Larry Hastings
# All rights reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included
# in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT.
# IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM,
# DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT,
# TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE
# OR THE USE OR OTHER DEALINGS IN THE SOFTWARE.


import builtins

def make_stdout_capture():
    text = []
    actual_print = builtins.print

    def captured_print(*a, end="\n", sep=" ", file=None):
        if file is not None:
            return actual_print(*a, end=end, sep=sep, file=file)
        t = sep.join([str(o) for o in a])
        t += end
        text.append(t)

    def start():
        builtins.print = captured_print
        return captured_print

    def end():
        builtins.print = actual_print
        result = "".join(text)
        return result

    return start, captured_print, end


def preload_local_summon():
    """
    Pre-load the local "summon" module, to preclude finding
    an already-installed one on the path.
    """
    from os.path import abspath, dirname, isfile, join, normpath
    import sys
    summon_dir = abspath(dirname(__file__))
    while True:
        summon_init = join(summon_dir, "summon/__init__.py")
        if isfile(summon_init):
            break
        parent = normpath(join(summon_dir, ".."))
        if parent == summon_dir:
            raise RuntimeError("can't find local summon package")
        summon_dir = parent
    sys.path.insert(1, summon_dir)
    import summon
    return summon_dir
