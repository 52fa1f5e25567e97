# =============================================================================
# Pi Camera VLM Logger - Description Log
# =============================================================================
# Append-only UTF-8 text log of generated descriptions, one record per line:
#   <YYYY-MM-DD HH:MM:SS>: <description>
# The file is opened in append mode for every record and is never truncated,
# rewritten or rotated here.
# =============================================================================

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_record(description: str, when: Optional[datetime] = None) -> str:
    """
    Format one log line (without the trailing newline).

    Line breaks inside the description are folded into single spaces so a
    record always occupies exactly one line.
    """
    when = when or datetime.now()
    text = " ".join(description.splitlines()).strip()
    return f"{when.strftime(TIMESTAMP_FORMAT)}: {text}"


class DescriptionLog:
    """
    Append-only description log.

    Args:
        path: Log file location; parent directories are created on first write.
    """

    def __init__(self, path: Union[str, Path] = "output.txt"):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, description: str, when: Optional[datetime] = None) -> str:
        """
        Append one timestamped record.

        Args:
            description: Generated text.
            when:        Record time; defaults to now (local time).

        Returns:
            str: The line written, without newline.
        """
        line = format_record(description, when)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
        logger.debug("Appended record to %s", self._path)
        return line
