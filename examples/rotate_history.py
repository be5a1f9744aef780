"""Minimal example rotating a log file into a compressed history."""

from __future__ import annotations

from pathlib import Path

import cyclelog


def main() -> None:
    cyclelog.configure({"logging": {"level": "DEBUG"}})

    log_file = Path("example-logs") / "app.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    rotation = cyclelog.Rotation().files(3).compress().truncate()
    for run in range(1, 6):
        log_file.write_text(f"run {run}\n" * 100, encoding="utf-8")
        rotation.rotate(log_file)
        print(run, rotation.is_successful(), rotation.archived_filename())


if __name__ == "__main__":
    main()
