"""claudectx: switch between saved Claude Code account profiles."""

__version__ = "0.2.0"
