import os
import time
import warnings
from dataclasses import dataclass, field
from typing import Callable

import pandas as pd
from typeguard import typechecked

debug = print


@dataclass
class ResultCache:
    """A result table persisted to disk, reused while it is valid.

    Attributes:
    ----------
    path (str)
        Comma delimited file holding the cached table
    clock (Callable[[], float])
        Current time, in seconds since the epoch
    max_age (float | None)
        Maximum age of the cached file in seconds, None for no limit
    depends_on (list[str])
        Input files, the cache is stale if any of them is newer than it
    policy (Callable[[float, float], bool] | None)
        Extra staleness rule, called with (file mtime, now)
    """

    path: str
    clock: Callable[[], float] = time.time
    max_age: float | None = None
    depends_on: list = field(default_factory=list)
    policy: Callable[[float, float], bool] | None = None

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def is_stale(self) -> bool:
        mtime = os.path.getmtime(self.path)
        now = self.clock()

        if self.max_age is not None and now - mtime > self.max_age:
            return True
        for dependency in self.depends_on:
            if os.path.isfile(dependency) and os.path.getmtime(dependency) > mtime:
                return True
        if self.policy is not None and self.policy(mtime, now):
            return True
        return False

    @typechecked
    def lookup(self) -> pd.DataFrame | None:
        """The cached table, or None when missing or stale."""
        if not self.exists():
            return None
        if self.is_stale():
            warnings.warn(f"Cached results at {self.path} are stale, recomputing.")
            return None
        debug(f"[Cache] using {self.path}")
        return pd.read_csv(self.path)

    @typechecked
    def store(self, table: pd.DataFrame) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        table.to_csv(self.path, index=False)

    def invalidate(self) -> None:
        if self.exists():
            os.remove(self.path)

    def get_or_compute(self, compute: Callable[[], pd.DataFrame]) -> pd.DataFrame:
        table = self.lookup()
        if table is None:
            table = compute()
            self.store(table)
        return table
