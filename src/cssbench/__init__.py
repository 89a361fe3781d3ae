"""cssbench: compare the speed of command-line style-sheet compilers.

Generates small, medium and large input fixtures, runs every competing
tool against them as an external process, and reports the mean
wall-clock time per tool and fixture size.
"""

__version__ = "0.1.0"
