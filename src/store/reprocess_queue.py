"""
Durable queue of listings whose extraction failed twice.

One record per line: "<id> — <url>".
"""

from pathlib import Path
from typing import List, NamedTuple

from src.store.file_manager import append_line

SEPARATOR = " — "


class QueuedListing(NamedTuple):
    vehicle_id: str
    url: str


def parse_line(line: str):
    line = line.strip()
    if not line or SEPARATOR not in line:
        return None
    vehicle_id, url = line.split(SEPARATOR, 1)
    if not vehicle_id.strip() or not url.strip():
        return None
    return QueuedListing(vehicle_id.strip(), url.strip())


class ReprocessQueue:
    def __init__(self, path: Path):
        self.path = Path(path)

    def enqueue(self, vehicle_id: str, url: str) -> None:
        append_line(self.path, f"{vehicle_id}{SEPARATOR}{url}")

    def read(self) -> List[QueuedListing]:
        if not self.path.exists():
            return []
        out: List[QueuedListing] = []
        seen = set()
        for line in self.path.read_text("utf-8").splitlines():
            item = parse_line(line)
            if item and item not in seen:
                seen.add(item)
                out.append(item)
        return out

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def __len__(self) -> int:
        return len(self.read())
