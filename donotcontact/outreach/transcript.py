"""
Append-only transcript of an email run.

One file per run (logs/email-run-<timestamp>.log) holding every message
sent or attempted, with its full body, followed by a summary.
"""

import os
from datetime import datetime, timezone
from typing import Callable, Optional

from donotcontact import config

RULE = "=" * 80
DIVIDER = "-" * 80


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TranscriptLog:
    """
    Writes the delivery transcript for one send run.

    The file is created on first write; every line is appended and the
    file is never rewritten.
    """

    def __init__(
        self,
        logs_dir: Optional[str] = None,
        now: Callable[[], datetime] = _utc_now,
    ):
        self.logs_dir = logs_dir or config.LOGS_DIR
        self._now = now
        self.path: Optional[str] = None

    def _stamp(self) -> str:
        return self._now().isoformat()

    def start(self) -> str:
        """Create the run's file and write the header. Returns the path."""
        os.makedirs(self.logs_dir, exist_ok=True)
        started = self._now()
        self.path = self._claim_file(started.strftime('%Y-%m-%dT%H-%M-%S'))

        self.log(RULE)
        self.log("DO NOT CONTACT - Email Send Log")
        self.log(f"Started: {started.isoformat()}")
        self.log(RULE)
        return self.path

    def _claim_file(self, stamp: str) -> str:
        # Runs starting in the same second get a numeric suffix
        suffix = 1
        while True:
            name = f"email-run-{stamp}.log" if suffix == 1 else f"email-run-{stamp}-{suffix}.log"
            path = os.path.join(self.logs_dir, name)
            try:
                with open(path, "x", encoding="utf-8"):
                    return path
            except FileExistsError:
                suffix += 1

    def log(self, message: str) -> None:
        if self.path is None:
            self.start()
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(f"{message}\n")

    def log_email(
        self,
        org_name: str,
        to_email: str,
        from_email: str,
        subject: str,
        body: str,
        success: bool,
        message_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        """Record one send attempt with its full body."""
        lines = [
            "",
            DIVIDER,
            f"Timestamp: {self._stamp()}",
            f"Organization: {org_name}",
            f"To: {to_email}",
            f"From: {from_email}",
            f"Subject: {subject}",
            f"Status: {'SENT' if success else 'FAILED'}",
        ]
        if message_id:
            lines.append(f"Message-ID: {message_id}")
        if error:
            lines.append(f"Error: {error}")
        lines += ["", "--- EMAIL BODY ---", body, "--- END BODY ---", DIVIDER]

        for line in lines:
            self.log(line)

    def log_summary(self, sent: int, failed: int) -> None:
        for line in (
            "",
            RULE,
            "SUMMARY",
            f"Completed: {self._stamp()}",
            f"Sent: {sent}",
            f"Failed: {failed}",
            f"Total: {sent + failed}",
            RULE,
        ):
            self.log(line)
