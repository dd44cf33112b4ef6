from __future__ import annotations

import zlib
from typing import Dict, Optional, Set

from replacer.logs import get_logger

logger = get_logger(__name__)


def content_checksum(content: str) -> int:
    return zlib.crc32(content.encode("utf-8", "surrogatepass"))


class CycleDetector:
    """Tracks content states seen during one step's fixpoint loop.

    Only lengths are recorded until a length repeats; from then on a CRC32 of
    the content is kept per length. Seeing a checksum twice for the same
    length means the step has returned to content it already produced.
    """

    def __init__(self) -> None:
        self._seen: Dict[int, Optional[Set[int]]] = {}

    def observe(self, content: str) -> bool:
        """Record ``content`` and return True when it closes a cycle."""

        length = len(content)
        if length not in self._seen:
            self._seen[length] = None
            return False

        checksum = content_checksum(content)
        logger.debug("length %d repeated, checksum %08x", length, checksum)
        checksums = self._seen[length]
        if checksums is None:
            self._seen[length] = {checksum}
            return False
        if checksum in checksums:
            return True
        checksums.add(checksum)
        return False
