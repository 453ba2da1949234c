"""Emitter registry -- lookup by target identifier and plugin discovery.

The :class:`EmitterRegistry` maps target identifiers (``"python-requests"``,
``"go"``) and their aliases to :class:`~curlgen.emitters.base.Emitter`
instances. It is an ordinary object, created by the caller and passed into
:func:`curlgen.converter.convert`; there is no process-wide registry.

For most use cases, call :func:`create_default_registry` to get a registry
pre-loaded with every built-in emitter. Third-party packages can add
targets by declaring an entry point in the ``curlgen.emitters`` group::

    [project.entry-points."curlgen.emitters"]
    ruby = "my_package.emitters:RubyNetHttpEmitter"
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from curlgen.emitters.base import Emitter
from curlgen.exceptions import PluginError, RequestValidationError
from curlgen.models import PluginsConfig

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "curlgen.emitters"
"""The entry-point group name used for emitter discovery."""


class EmitterRegistry:
    """Registry and dispatcher for code emitters.

    Identifiers are matched case-insensitively. Registering an emitter
    whose target is already present replaces it.

    Example::

        registry = EmitterRegistry()
        registry.register(GoEmitter())
        code = registry.get("golang").emit(request)
    """

    def __init__(self) -> None:
        self._emitters: dict[str, Emitter] = {}
        self._aliases: dict[str, str] = {}

    def register(self, emitter: Emitter) -> None:
        """Register *emitter* under its target and aliases.

        Args:
            emitter: The emitter instance to register.

        Raises:
            PluginError: If an alias is already claimed by another target.
        """
        target = emitter.target.lower()
        for alias in emitter.aliases:
            owner = self._aliases.get(alias.lower())
            if owner is not None and owner != target:
                raise PluginError(
                    f"Alias '{alias}' of target '{target}' is already used by '{owner}'"
                )
        self._emitters[target] = emitter
        for alias in emitter.aliases:
            self._aliases[alias.lower()] = target

    def get(self, target: str) -> Emitter:
        """Resolve a target identifier or alias to its emitter.

        Args:
            target: Target identifier or alias, e.g. ``"python"``.

        Returns:
            The registered :class:`~curlgen.emitters.base.Emitter`.

        Raises:
            RequestValidationError: With message ``"unknown target"`` if
                nothing is registered under *target*.
        """
        key = target.strip().lower()
        key = self._aliases.get(key, key)
        emitter = self._emitters.get(key)
        if emitter is None:
            raise RequestValidationError("unknown target", token=target, stage="emit")
        return emitter

    def list_targets(self) -> list[str]:
        """Return all registered target identifiers in registration order."""
        return list(self._emitters)

    def describe(self) -> list[dict[str, str]]:
        """Return one dict per emitter with target, aliases, label and language."""
        return [
            {
                "target": target,
                "aliases": ", ".join(emitter.aliases),
                "label": emitter.label or target,
                "language": emitter.language,
            }
            for target, emitter in self._emitters.items()
        ]

    def __contains__(self, target: str) -> bool:
        key = target.strip().lower()
        return self._aliases.get(key, key) in self._emitters

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, config: Optional[PluginsConfig] = None) -> list[str]:
        """Load emitters registered under the ``curlgen.emitters`` entry points.

        When ``config.enabled`` is non-empty only those entry points are
        loaded; otherwise every entry point not in ``config.disabled`` is.
        Entry points that fail to load are logged and skipped so that the
        built-in targets always stay available.

        Args:
            config: Allow/deny lists. ``None`` loads everything.

        Returns:
            The names of the entry points that were loaded.
        """
        config = config or PluginsConfig()
        enabled_set = set(config.enabled)
        disabled_set = set(config.disabled)
        loaded: list[str] = []

        for ep in importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP):
            name = ep.name
            if enabled_set and name not in enabled_set:
                logger.debug("Emitter '%s' not in enabled list, skipping", name)
                continue
            if name in disabled_set:
                logger.debug("Emitter '%s' is disabled, skipping", name)
                continue

            try:
                emitter_cls = ep.load()
                emitter = emitter_cls()
                if not isinstance(emitter, Emitter):
                    raise PluginError(f"'{name}' does not provide an Emitter")
                self.register(emitter)
            except Exception as exc:
                logger.warning("Failed to load emitter '%s': %s", name, exc)
                continue
            logger.debug("Loaded emitter '%s' for target '%s'", name, emitter.target)
            loaded.append(name)

        return loaded


def create_default_registry(
    discover: bool = False,
    config: Optional[PluginsConfig] = None,
) -> EmitterRegistry:
    """Create an :class:`EmitterRegistry` pre-loaded with the built-in emitters.

    The following targets are registered:

    - ``python-requests`` -- Python with :mod:`requests`.
    - ``python-httpx`` -- Python with :mod:`httpx`.
    - ``javascript-fetch`` -- JavaScript ``fetch``.
    - ``go`` -- Go ``net/http``.
    - ``httpie`` -- the HTTPie CLI.
    - ``curl`` -- a normalized curl command.

    Args:
        discover: Also load third-party emitters from entry points.
        config: Allow/deny lists applied during discovery.

    Returns:
        A fully initialised :class:`EmitterRegistry`.
    """
    from curlgen.emitters.go import GoEmitter
    from curlgen.emitters.javascript import JavaScriptFetchEmitter
    from curlgen.emitters.python import PythonHttpxEmitter, PythonRequestsEmitter
    from curlgen.emitters.shell import CurlEmitter, HTTPieEmitter

    registry = EmitterRegistry()
    registry.register(PythonRequestsEmitter())
    registry.register(PythonHttpxEmitter())
    registry.register(JavaScriptFetchEmitter())
    registry.register(GoEmitter())
    registry.register(HTTPieEmitter())
    registry.register(CurlEmitter())
    if discover:
        registry.discover(config)
    return registry
