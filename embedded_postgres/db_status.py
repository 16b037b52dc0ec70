from __future__ import annotations

import dataclasses
from pathlib import Path


@dataclasses.dataclass(frozen=True)
class DBStatus:
    """
    The status of an embedded postgres server as reported by pg_ctl.
    """

    pg_data: Path
    port: int
    running: bool
    pid: int | None
