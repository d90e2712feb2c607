"""
JSONL-based set history.

Reads the logged sets the engine works from.  The file contains one JSON
object per line, one line per set:

    {"exercise_name": "Bench Press", "weight": 80, "reps": 8, "rir": 2,
     "set_type": "working", "completed_at": "2026-03-02T18:10:00"}
"""

import json
from pathlib import Path

from ..core.config import RECENT_SETS_LIMIT
from ..core.models import SetRecord
from ..core.progression import recent_working_sets
from .serializers import ValidationError, set_record_from_dict, set_record_to_json_line


class SetHistoryStore:
    """
    Read access to a JSONL set history file.

    Lines with ``"type": "comment"`` and blank lines are skipped.  The
    engine never writes history; append_set exists for fixtures and import
    tooling.
    """

    def __init__(self, history_path: str | Path):
        """
        Initialize the history store.

        Args:
            history_path: Path to the JSONL history file
        """
        self.history_path = Path(history_path)

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def load_sets(self) -> list[SetRecord]:
        """
        Load all sets from the history file, in file order.

        Raises:
            FileNotFoundError: If the history file doesn't exist
            ValidationError: If a line is not a valid set record
        """
        if not self.history_path.exists():
            raise FileNotFoundError(f"History file not found: {self.history_path}")

        sets: list[SetRecord] = []

        with open(self.history_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    data = json.loads(line)
                    if isinstance(data, dict) and data.get("type") == "comment":
                        continue
                    sets.append(set_record_from_dict(data))
                except (json.JSONDecodeError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e

        return sets

    def recent_working_sets(
        self, exercise_name: str, limit: int = RECENT_SETS_LIMIT
    ) -> list[SetRecord]:
        """Last ``limit`` working sets for an exercise, most recent first."""
        return recent_working_sets(exercise_name, self.load_sets(), limit)

    def append_set(self, record: SetRecord) -> None:
        """Append one set to the history file, creating it if needed."""
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.history_path, "a", encoding="utf-8") as f:
            f.write(set_record_to_json_line(record) + "\n")
