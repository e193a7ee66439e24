"""Logging to the system log and to the screen."""

import sys
import syslog
import traceback

LOG_IDENT = "mmt-5greplay"
TRACE_DEPTH = 10


def open_log():
    """Open the system log; call before writing to it."""
    syslog.openlog(
        ident=LOG_IDENT,
        logoption=syslog.LOG_NDELAY | syslog.LOG_CONS | syslog.LOG_PERROR,
        facility=syslog.LOG_USER,
    )


def close_log():
    """Close the system log."""
    syslog.closelog()


def _format(message, args):
    return message % args if args else message


def log_dual(level, message, *args):
    """Write a %-formatted message both to the system log and to stderr."""
    text = _format(message, args)
    syslog.syslog(level, text)
    print(text, file=sys.stderr)


def log_execution_trace():
    """Log the caller's stack, most recent call first, and return the lines."""
    frames = traceback.extract_stack(limit=TRACE_DEPTH + 1)[:-1]
    lines = [
        f"{number}. {frame.filename}:{frame.lineno} {frame.name}"
        for number, frame in enumerate(reversed(frames), start=1)
    ]
    for line in lines:
        syslog.syslog(syslog.LOG_ERR, line)
    return lines