"""scriptbind - Native type bindings for embedded scripting engines."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("scriptbind")
except PackageNotFoundError:
    __version__ = "(local)"
