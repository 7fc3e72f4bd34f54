"""
BullyWatch - Logger Module
==========================

Custom tree-style logging with configurable timezone and daily rotation.

DESIGN:
    This logger provides structured, hierarchical output that's easy to scan
    visually. Tree-style formatting groups related information together
    (detector hits, sweep summaries, config dumps).

    Key features:
    - Tree-style formatting for structured data visualization
    - Timestamps in the configured zone (BULLYWATCH_TZ, default Asia/Jerusalem)
    - Daily log rotation in dated folders
    - 7-day log retention with automatic cleanup
    - Session tracking with unique run IDs
    - Optional webhook integration for error alerts
"""

import asyncio
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import aiohttp
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path(os.getenv("BULLYWATCH_LOG_DIR", "logs"))
"""Directory for all log files, organized by date."""

LOG_RETENTION_DAYS = 7
"""Number of days to retain log directories before cleanup."""

DEFAULT_TZ_NAME = "Asia/Jerusalem"


def _resolve_log_tz() -> ZoneInfo:
    try:
        return ZoneInfo(os.getenv("BULLYWATCH_TZ", DEFAULT_TZ_NAME))
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")


LOG_TZ = _resolve_log_tz()
"""Timezone used for log timestamps."""


# =============================================================================
# Tree Logger Class
# =============================================================================

class TreeLogger:
    """
    Custom logger with tree-style formatting and timezone support.

    DESIGN:
        Uses tree-style output (├─ └─) for visual hierarchy.
        Separate error log file for quick troubleshooting.
        Optional webhook notifications for errors with details.

    Attributes:
        run_id: Unique identifier for this process session.
        log_file: Path to the main log file.
        error_file: Path to the error-only log file.
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, logs_dir: Path = LOGS_DIR, name: str = "BullyWatch") -> None:
        """
        Initialize logger with run ID and daily log file.

        Creates dated log directory, initializes log files,
        cleans up old logs, and writes session header.

        Args:
            logs_dir: Root directory for dated log folders.
            name: Prefix used for log file names.
        """
        self.run_id: str = str(uuid.uuid4())[:8]
        self._webhook_url: Optional[str] = None
        self._name = name
        self._logs_dir = logs_dir

        today = datetime.now(LOG_TZ).strftime("%Y-%m-%d")
        self.log_dir = logs_dir / today
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / f"{name}-{today}.log"
        self.error_file = self.log_dir / f"{name}-Errors-{today}.log"

        self._cleanup_old_logs()
        self._write_session_header()

    def set_webhook(self, url: Optional[str]) -> None:
        """
        Set webhook URL for error notifications.

        Args:
            url: Webhook URL that accepts a JSON POST.
        """
        self._webhook_url = url

    # =========================================================================
    # Log Cleanup
    # =========================================================================

    def _cleanup_old_logs(self) -> None:
        """
        Remove log directories older than retention period.

        Only removes directories matching date format YYYY-MM-DD.
        """
        if not self._logs_dir.exists():
            return

        now = datetime.now()
        deleted = 0

        for item in self._logs_dir.iterdir():
            if not item.is_dir():
                continue
            try:
                dir_date = datetime.strptime(item.name, "%Y-%m-%d")
            except ValueError:
                continue  # Not a dated log directory
            if (now - dir_date).days > LOG_RETENTION_DAYS:
                for f in item.iterdir():
                    f.unlink()
                item.rmdir()
                deleted += 1

        if deleted > 0:
            print(f"[LOG CLEANUP] Removed {deleted} old log directories")

    # =========================================================================
    # Session Header
    # =========================================================================

    def _write_session_header(self) -> None:
        """Write session start marker to log file."""
        header = f"""
============================================================
NEW SESSION - RUN ID: {self.run_id}
[{datetime.now(LOG_TZ).strftime("%I:%M:%S %p %Z")}]
============================================================
"""
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(header)

    # =========================================================================
    # Core Logging
    # =========================================================================

    def _get_timestamp(self) -> str:
        """
        Get current timestamp in the log timezone.

        Returns:
            Formatted timestamp string like "[02:30:45 PM IST]".
        """
        return datetime.now(LOG_TZ).strftime("[%I:%M:%S %p %Z]")

    def _write(
        self,
        message: str,
        emoji: str = "",
        include_timestamp: bool = True,
        is_error: bool = False,
    ) -> None:
        """
        Write log message to console and file.

        Args:
            message: Log message content.
            emoji: Optional emoji prefix.
            include_timestamp: Whether to prepend timestamp.
            is_error: Whether to also write to error log.
        """
        if include_timestamp:
            timestamp = self._get_timestamp()
            full_message = f"{timestamp} {emoji} {message}" if emoji else f"{timestamp} {message}"
        else:
            full_message = f"{emoji} {message}" if emoji else message

        print(full_message)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(f"{full_message}\n")

        if is_error:
            with open(self.error_file, "a", encoding="utf-8") as f:
                f.write(f"{full_message}\n")

    def _write_details(self, details: List[Tuple[str, str]], is_error: bool = False) -> None:
        for i, (key, value) in enumerate(details):
            prefix = "└─" if i == len(details) - 1 else "├─"
            self._write(f"  {prefix} {key}: {value}", include_timestamp=False, is_error=is_error)

    # =========================================================================
    # Tree Formatting
    # =========================================================================

    def tree(
        self,
        title: str,
        items: List[Tuple[str, str]],
        emoji: str = "📦",
    ) -> None:
        """
        Log structured data in tree format.

        Args:
            title: Main heading for the tree.
            items: List of (key, value) tuples to display.
            emoji: Emoji prefix for the title.

        Example output:
            [02:30:45 PM IST] 🚨 Severe Pile-On Detected
              ├─ Group: 120363
              ├─ Attackers: 5
              └─ Score: 10
        """
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

        self._write(title, emoji=emoji)
        self._write_details(items)

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

    def tree_nested(
        self,
        title: str,
        sections: List[Tuple[str, List[Tuple[str, str]]]],
        emoji: str = "📦",
    ) -> None:
        """
        Log nested tree structure with sections.

        Args:
            title: Main heading for the tree.
            sections: List of (section_name, items) tuples.
            emoji: Emoji prefix for the title.
        """
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

        self._write(title, emoji=emoji)

        for i, (section_name, items) in enumerate(sections):
            is_last_section = i == len(sections) - 1
            section_prefix = "└─" if is_last_section else "├─"
            self._write(f"  {section_prefix} {section_name}", include_timestamp=False)

            for j, (key, value) in enumerate(items):
                connector = "   " if is_last_section else "│  "
                item_prefix = "└─" if j == len(items) - 1 else "├─"
                self._write(
                    f"  {connector} {item_prefix} {key}: {value}",
                    include_timestamp=False,
                )

        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write("\n")

    # =========================================================================
    # Log Levels
    # =========================================================================

    def debug(self, msg: str, details: Optional[List[Tuple[str, str]]] = None) -> None:
        """
        Log debug message (only if DEBUG env var set).

        Args:
            msg: Debug message content.
            details: Optional list of (key, value) detail tuples.
        """
        if os.getenv("DEBUG"):
            self._write(msg, "🔍")
            if details:
                self._write_details(details)

    def info(self, msg: str) -> None:
        """Log informational message."""
        self._write(msg, "ℹ️")

    def warning(self, msg: str, details: Optional[List[Tuple[str, str]]] = None) -> None:
        """
        Log warning message.

        Args:
            msg: Warning message content.
            details: Optional list of (key, value) detail tuples.
        """
        self._write(msg, "⚠️")
        if details:
            self._write_details(details)

    def error(
        self,
        msg: str,
        details: Optional[List[Tuple[str, str]]] = None,
    ) -> None:
        """
        Log error message with optional structured details.

        DESIGN:
            Errors with details use tree format for visibility.
            Sends to webhook if configured and an event loop is running.
            Always written to both main and error log files.

        Args:
            msg: Error message or title.
            details: Optional list of (key, value) detail tuples.
        """
        if not details:
            self._write(msg, "❌", is_error=True)
            return

        self._write("", is_error=True)
        self._write(msg, "❌", is_error=True)
        self._write_details(details, is_error=True)
        self._write("", include_timestamp=False, is_error=True)

        if self._webhook_url:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return  # No loop (sync caller), skip webhook
            loop.create_task(self._send_webhook_error(msg, details))

    # =========================================================================
    # Webhook Integration
    # =========================================================================

    async def _send_webhook_error(
        self,
        title: str,
        details: List[Tuple[str, str]],
    ) -> None:
        """
        Send error notification to the configured webhook.

        Args:
            title: Error title.
            details: List of (key, value) detail tuples.
        """
        if not self._webhook_url:
            return

        payload = {
            "title": f"❌ {title}",
            "details": {k: v for k, v in details},
            "service": self._name,
            "run_id": self.run_id,
            "timestamp": datetime.now(LOG_TZ).isoformat(),
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._webhook_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=10),
                ) as resp:
                    if resp.status >= 300:
                        print(f"Webhook error: {resp.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            print(f"Failed to send webhook: {e}")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()
"""Global logger instance shared by every module."""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "logger",
    "TreeLogger",
    "LOG_TZ",
]
