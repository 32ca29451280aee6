# lockfile_audit/formats/registry.py

"""
Report format lookup.

Built-in formats register themselves when ``lockfile_audit.formats`` is
imported. Formats shipped by other distributions are found through the
``lockfile_audit.formats`` entry-point group, loaded the first time a name is
requested that is not registered yet:

    [project.entry-points."lockfile_audit.formats"]
    html = "my_package.html:HtmlFormat"
"""

import logging
from importlib.metadata import entry_points
from typing import Dict, List, Optional, Type

from ..exceptions import FormatNotFoundError
from .base import ReportFormat

logger = logging.getLogger("lockfile-audit")

ENTRY_POINT_GROUP = "lockfile_audit.formats"

FORMATS: Dict[str, Type[ReportFormat]] = {}

_plugins_loaded = False


def register_format(name: str, cls: Optional[Type[ReportFormat]] = None):
    """
    Register a report format under ``name``.

    Can be called directly, ``register_format("html", HtmlFormat)``, or used
    as a class decorator, ``@register_format("html")``.
    """
    def decorator(format_cls: Type[ReportFormat]) -> Type[ReportFormat]:
        if not (isinstance(format_cls, type) and issubclass(format_cls, ReportFormat)):
            raise TypeError(f"{format_cls!r} is not a ReportFormat subclass")
        if name in FORMATS and FORMATS[name] is not format_cls:
            logger.warning(f"Report format '{name}' is registered twice; using {format_cls.__name__}")
        format_cls.name = name
        FORMATS[name] = format_cls
        return format_cls

    if cls is not None:
        return decorator(cls)
    return decorator


def load_plugins() -> None:
    """Register the formats advertised in the entry-point group (once)."""
    global _plugins_loaded
    if _plugins_loaded:
        return
    _plugins_loaded = True

    for entry_point in entry_points(group=ENTRY_POINT_GROUP):
        if entry_point.name in FORMATS:
            continue
        try:
            format_cls = entry_point.load()
            register_format(entry_point.name, format_cls)
        except (ImportError, AttributeError, TypeError) as e:
            logger.warning(f"Could not load report format plugin '{entry_point.name}': {e}")
            continue
        logger.debug(f"Loaded report format plugin '{entry_point.name}' from {entry_point.value}")


def available_formats() -> List[str]:
    return sorted(FORMATS)


def load_format(name: str) -> Type[ReportFormat]:
    """
    Resolve a format name to its ReportFormat class.

    Raises:
        FormatNotFoundError: If no built-in or plugin format has that name
    """
    if name not in FORMATS:
        load_plugins()
    try:
        return FORMATS[name]
    except KeyError:
        raise FormatNotFoundError(name, available_formats())
