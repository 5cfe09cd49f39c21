"""Top-level package for howtfdoi.

This package contains the implementation of a command line tool named
``howtfdoi`` which answers plain-English questions about shell usage
with a ready-to-run command and a short explanation.  Answers come from
a large language model reached through one of several providers (the
hosted Anthropic API, the OpenAI API or a local LM Studio server).

The core logic lives in the ``providers`` module (backend abstraction
and stream aggregation) and the ``pipeline`` module (display, safety
check, history, clipboard and confirmed execution).  The ``cli``
module wires these together behind the ``howtfdoi`` entry point.
Alternatively you can run ``python -m howtfdoi.cli`` for local
development.
"""

__version__ = "1.0.4"

__all__ = [
    "cli",
    "clipboard",
    "config",
    "executor",
    "history",
    "pipeline",
    "prompts",
    "providers",
    "response",
    "validator",
]
