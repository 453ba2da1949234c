"""Built-in CLI sub-commands for curlgen.

This package groups the Typer command modules that form the CLI's
command tree:

* :mod:`~curlgen.commands.convert` -- ``convert``, ``inspect`` and
  ``targets``, registered directly on the root app.
* :mod:`~curlgen.commands.examples` -- browse and convert the built-in
  example gallery.
* :mod:`~curlgen.commands.config` -- view and modify global settings.

Single commands are plain callback functions; multi-command groups export
a :class:`typer.Typer` sub-application.
"""
