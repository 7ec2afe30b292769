"""Loading the system-of-record adapter from a dotted path."""

import importlib

import structlog

from rankflow.sync.errors import ContentSourceError
from rankflow.sync.protocols import ContentSource


logger = structlog.get_logger()


def load_content_source(path: str | None) -> ContentSource:
    """Import and build the content source named by ``module:callable``.

    The callable is invoked without arguments and must return an object
    implementing ContentSource.

    Args:
        path: Dotted path such as ``myapp.adapters:build_source``.

    Returns:
        The content source instance.

    Raises:
        ContentSourceError: If the path is missing, malformed or fails to
            import or build.
    """
    if not path:
        raise ContentSourceError(
            path, "No content source configured; set RANKFLOW_CONTENT_SOURCE"
        )

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ContentSourceError(path, "Content source must look like 'module:callable'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ContentSourceError(path, f"Cannot import module {module_name}: {e}") from e

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ContentSourceError(path, f"{attr} is not a callable in {module_name}")

    source = factory()
    logger.info("content_source_loaded", path=path, source_type=type(source).__name__)
    return source
