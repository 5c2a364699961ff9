"""Sprig constructor-injection container.

Sprig discovers component classes in a package, builds each of them exactly once,
and hands them to one another through their constructors. Resolution is a plain
fixed-point loop: keep building whatever has all of its dependencies available, and
stop with an error naming the stuck components when a pass builds nothing.

Key Features:
    - Stereotype markers (@component, @service, @repository, @configuration)
    - Injection by type, with ``Annotated[T, "beanName"]`` qualifiers
    - Most-specific constructor first, including ``@constructor`` classmethods
    - Ambiguous and duplicate registrations rejected up front
    - Immutable registry once initialisation completes

Basic Usage:
    >>> from sprig.context import ApplicationContext
    >>>
    >>> context = ApplicationContext("myapp")
    >>> context.init()
    >>> service = context.get("orderService")

The framework consists of several core modules:
    - markers: Stereotype and constructor decorators
    - descriptors: Class introspection and candidate sets
    - discovery: Package scanning
    - resolver: The fixed-point resolution algorithm
    - bean_registry: The frozen name-to-instance registry
    - context: The ApplicationContext facade
    - builders: High-level entry points
    - settings: Resolution policies
    - errors: Framework-specific exceptions
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
