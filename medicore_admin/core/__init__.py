"""
Console core: session state, per-entity caches, invalidation and routing.

Import concrete pieces from their subpackages (``core.session``,
``core.cache``, ``core.events``, ``core.routing``); ``ConsoleContainer``
lives in ``core.container`` and wires them together.
"""
