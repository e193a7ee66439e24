"""Version information."""

import re
import time

VERSION_NUMBER = "0.0.7"
GIT_VERSION = ""
# Bump when the structure of rule plugins changes.
REQUIRED_PLUGIN_VERSION = "0.0.1"
BUILD_DATE = time.strftime("%b %d %Y %H:%M:%S")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_DIGITS = "0123456789"


def _leading_int(text):
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def version_index(version):
    """Turn a dotted version such as "1.2.18" into a comparable number.

    Each of the first three components is weighted by a power of 100.
    """
    pos = 0
    length = len(version)
    value = 0
    weight = 100 * 100 * 100
    while True:
        value += weight * _leading_int(version[pos:])
        while pos < length and version[pos] in _DIGITS:
            pos += 1
        pos += 1
        weight //= 100
        if pos >= length or weight == 1:
            break
    return value % (1 << 32)


def version_info():
    """Return the version string with its git hash and build date."""
    if GIT_VERSION:
        return f"{VERSION_NUMBER} ({GIT_VERSION} - {BUILD_DATE})"
    return f"{VERSION_NUMBER} ({BUILD_DATE})"


def current_version_index():
    """Return the numeric index of the running version."""
    return version_index(VERSION_NUMBER)


def required_plugin_version_index():
    """Return the numeric index of the plugin version this program requires."""
    return version_index(REQUIRED_PLUGIN_VERSION)