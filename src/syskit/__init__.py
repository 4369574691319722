"""syskit: categorized system actions in a full-screen terminal menu."""

__version__ = "1.0.0"
__author__ = "Michael Mattsson"
__repository__ = "https://github.com/mdmattsson/syskit"
