"""
stackup log output

Console: text (human readable)
File: JSON lines (machine readable, one record per event)
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

import click

LEVEL_COLORS = {
    "WARNING": "yellow",
    "ERROR": "red",
}


class StackupLogger:
    """
    Logger for upgrade runs

    Console: text lines with time and level
    File: JSON records in a daily log file, each tagged with the run id so
    several runs on the same day can be told apart
    """

    def __init__(
        self,
        name: str = "stackup",
        log_dir: Path | None = None,
        run_id: str | None = None,
    ) -> None:
        """
        Args:
            name: Logger name, also the log file prefix
            log_dir: Log output directory (default: .stackup/logs)
            run_id: Upgrade run id (default: timestamp plus a random suffix)
        """
        self.name = name
        self.log_dir = log_dir if log_dir else Path(".stackup/logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)

        if run_id:
            self.run_id = run_id
        else:
            timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
            self.run_id = f"run-{timestamp}-{uuid.uuid4().hex[:6]}"

    def _get_log_file(self) -> Path:
        """Path of today's log file"""
        today = datetime.now().strftime("%Y%m%d")
        return self.log_dir / f"{self.name}-{today}.log"

    def log(self, level: str, message: str, **kwargs: Any) -> None:
        """
        Write a structured log record

        Args:
            level: DEBUG, INFO, WARNING or ERROR
            message: Log message
            **kwargs: Extra structured fields for the file record
        """
        now = datetime.now()

        time_str = now.strftime("%H:%M:%S")
        line = f"{time_str} [{level}] {message}"
        click.echo(click.style(line, fg=LEVEL_COLORS.get(level)))

        log_entry = {
            **kwargs,
            "timestamp": now.isoformat(),
            "run_id": self.run_id,
            "level": level,
            "message": message,
        }
        with open(self._get_log_file(), "a") as f:
            f.write(json.dumps(log_entry) + "\n")

    def read_run(self) -> list[dict]:
        """Records of this run from today's log file, oldest first."""
        log_file = self._get_log_file()
        if not log_file.exists():
            return []

        records = []
        with open(log_file) as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if entry.get("run_id") == self.run_id:
                    records.append(entry)
        return records

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, **kwargs)
