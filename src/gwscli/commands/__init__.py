"""
The six command line tools, one module each.  Every module builds a
CommandSet called 'commands' and exposes main() for its console script.
"""
