"""Code emitters -- render a RequestModel as source code for one target.

Each emitter is a small class that flattens the request into template
variables and renders a Jinja2 template from ``emitters/templates/``.
Look emitters up through an :class:`EmitterRegistry`::

    from curlgen.emitters import create_default_registry

    registry = create_default_registry()
    code = registry.get("python").emit(request)
"""

from curlgen.emitters.base import Emitter
from curlgen.emitters.registry import EmitterRegistry, create_default_registry

__all__ = ["Emitter", "EmitterRegistry", "create_default_registry"]
