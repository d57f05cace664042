import os
from typing import Iterable

from ..errors import FileOpenFailure, OutputAlreadyExists
from ..tracking.types import TrackingRecord


class TrackingRecordWriter:
    """Append-only writer of one result line per tracking record.
    Never overwrites an existing result file.
    """
    def __init__(self, path):
        self.path = os.fspath(path)
        if os.path.exists(self.path):
            raise OutputAlreadyExists(
                f"Output file {self.path} already exists; don't overwrite", path=self.path
            )
        try:
            os.makedirs(os.path.dirname(self.path) or '.', exist_ok=True)
            # 'x' so a concurrent writer cannot clobber the file either
            self.f = open(self.path, 'x', encoding='utf-8')
        except FileExistsError as e:
            raise OutputAlreadyExists(
                f"Output file {self.path} already exists; don't overwrite", path=self.path
            ) from e
        except OSError as e:
            raise FileOpenFailure(f"Could not open file {self.path}: {e}") from e
        self.count = 0

    def write(self, rec: TrackingRecord):
        self.f.write(rec.to_line() + '\n')
        self.count += 1

    def write_all(self, records: Iterable[TrackingRecord]):
        for rec in records:
            self.write(rec)

    def close(self):
        if not self.f.closed:
            self.f.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
