"""Verbose-only console logging shared by the library and the CLI."""

VERBOSE = False


def set_verbose(enabled):
    global VERBOSE
    VERBOSE = bool(enabled)


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)
