from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    package_dir: Path
    data_dir: Path
    schema_dir: Path
    userdata_dir: Path

    @property
    def telemetry_file(self) -> Path:
        return self.userdata_dir / "telemetry.jsonl"


def get_paths() -> Paths:
    # Course data ships inside the package; user data goes next to src/.
    package_dir = Path(__file__).resolve().parent
    data_dir = package_dir / "data"
    return Paths(
        package_dir=package_dir,
        data_dir=data_dir,
        schema_dir=data_dir / "schemas",
        userdata_dir=package_dir.parents[1] / "userdata",
    )
