"""
Logger Module for SKELETON COACH.

Per-session event log, saved as JSON when the session ends.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from enum import Enum
import json
import time
from pathlib import Path


class LogLevel(Enum):
    """Log levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogCategory(Enum):
    """Log categories."""
    SENSOR = "sensor"
    POSE = "pose"
    PHASE = "phase"
    SYSTEM = "system"


@dataclass
class LogEntry:
    """Log entry."""
    timestamp: float
    level: LogLevel
    category: LogCategory
    message: str
    data: Optional[Dict] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'level': self.level.value,
            'category': self.category.value,
            'message': self.message,
            'data': self.data,
        }


@dataclass
class SessionLogger:
    """
    Logger for exercise sessions.

    Entries stay in memory until save_session_log() writes them to
    `<log_dir>/session_<id>_<epoch>.json`.
    """

    session_id: str
    log_dir: str = "./data/logs"
    entries: List[LogEntry] = field(default_factory=list)
    failed_checks: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)

    def log(self, level: LogLevel, category: LogCategory, message: str, data: Optional[Dict] = None):
        """
        Log a message.

        Args:
            level: Log level
            category: Log category
            message: Log message
            data: Optional data
        """
        entry = LogEntry(
            timestamp=time.time(),
            level=level,
            category=category,
            message=message,
            data=data
        )
        self.entries.append(entry)

    def info(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log info message."""
        self.log(LogLevel.INFO, category, message, data)

    def warning(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log warning message."""
        self.log(LogLevel.WARNING, category, message, data)

    def log_step(self, frame_number: int, result: Any, tolerance: float):
        """
        Log a classified frame.

        Failed checks are only counted per phase. A transition gets its own
        entry carrying the number of failed checks before it; counts still
        pending are written by flush_failed_checks().
        """
        if not result.advanced:
            phase = result.phase.name.lower()
            self.failed_checks[phase] = self.failed_checks.get(phase, 0) + 1
            return

        previous_phase = result.previous_phase.name.lower()
        self.info(LogCategory.PHASE, result.feedback, {
            'frame_number': frame_number,
            'previous_phase': previous_phase,
            'phase': result.phase.name.lower(),
            'repetitions': result.repetitions,
            'tolerance': tolerance,
            'failed_checks': self.failed_checks.pop(previous_phase, 0),
        })

    def flush_failed_checks(self):
        """Write pending failed-check counts as one entry."""
        if not self.failed_checks:
            return
        self.log(LogLevel.DEBUG, LogCategory.POSE, "Failed checks", dict(self.failed_checks))
        self.failed_checks.clear()

    def save_session_log(self) -> Path:
        """Save session log to file and return its path."""
        self.flush_failed_checks()
        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"session_{self.session_id}_{int(time.time())}.json"

        log_data = {
            'session_id': self.session_id,
            'timestamp': time.time(),
            'entries': [entry.to_dict() for entry in self.entries]
        }

        with open(log_file, 'w', encoding='utf-8') as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False)
        return log_file


def create_session_logger(session_id: str, log_dir: str = "./data/logs") -> SessionLogger:
    """
    Create a session logger.

    Args:
        session_id: Session ID
        log_dir: Log directory

    Returns:
        SessionLogger instance
    """
    return SessionLogger(session_id, log_dir)
