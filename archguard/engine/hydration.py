"""Source hydration for assembled contexts.

Assembly never touches the disk. After ``assemble()`` the caller passes a
``read_range(file_path, start, end) -> str`` collaborator here to fill in
each symbol's code.
"""

from collections.abc import Callable

import structlog

from archguard.models import MiniCodebase

logger = structlog.get_logger()

ReadRange = Callable[[str, int, int], str]


def hydrate(mini: MiniCodebase, read_range: ReadRange) -> MiniCodebase:
    """Return a copy of ``mini`` with ``code`` filled in where possible.

    Entries without a byte range, or whose read fails with ``OSError`` or
    ``ValueError``, keep ``code=None``. The input is not modified.
    """
    entries = []
    hydrated = 0

    for entry in mini.symbols:
        if entry.byte_range is None:
            entries.append(entry)
            continue

        start, end = entry.byte_range
        try:
            code = read_range(entry.file_path, start, end)
        except (OSError, ValueError) as e:
            logger.warning(
                "Failed to hydrate symbol",
                symbol_id=entry.id,
                file_path=entry.file_path,
                error=str(e),
            )
            entries.append(entry)
            continue

        entries.append(entry.model_copy(update={"code": code}))
        hydrated += 1

    logger.info("Context hydrated", symbols=len(entries), hydrated=hydrated)
    return mini.model_copy(update={"symbols": entries})
