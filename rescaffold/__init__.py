"""rescaffold -- resource scaffolding for web applications.

Generates models, validators, unit tests and migrations for a named
resource without ever overwriting existing files, and buffers log output
emitted before the logging sink is ready.
"""

__version__ = "0.1.0"
