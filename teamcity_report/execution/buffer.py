"""Per-package result buffering.

go test only names the package in its summary line, after all of the
package's tests have finished, so results are held here until then.
"""

from __future__ import annotations

from dataclasses import dataclass, field

PENDING = "PENDING"


@dataclass
class TestRecord:
    """Observed outcome of a single test."""

    __test__ = False

    name: str
    status: str = PENDING  # PENDING, PASS, FAIL or SKIP
    duration_seconds: float = 0.0
    output: list[str] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.status != PENDING


class PackageBuffer:
    """Test records of the package currently being accumulated.

    Records are kept in the order their ``=== RUN`` lines were seen, which
    is the order they are reported in, regardless of the (possibly
    interleaved) order of their result lines.
    """

    def __init__(self) -> None:
        self.records: list[TestRecord] = []

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __getitem__(self, index: int) -> TestRecord:
        return self.records[index]

    def start(self, name: str) -> TestRecord:
        """Append a new pending record for *name*."""
        record = TestRecord(name=name)
        self.records.append(record)
        return record

    def find(self, name: str) -> int | None:
        """Return the index of the record a result line for *name* belongs to.

        The earliest record named *name* that has no result yet is
        preferred, so repeated runs of one test (`-count`) pair up with
        their own result lines.  If every such record is finished the last
        one is returned.  None when no record has that name.
        """
        candidate = None
        for index, record in enumerate(self.records):
            if record.name != name:
                continue
            if not record.finished:
                return index
            candidate = index
        return candidate

    def clear(self) -> None:
        self.records = []
