"""Fixed-width result table for the regression suite."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Union

LABEL_WIDTH = 31
VALUE_WIDTH = 11
UNIT_WIDTH = 7


@dataclass
class ReportRow:
    """One measured figure."""
    metric: str
    value: Union[int, float]
    unit: str

    def format_value(self) -> str:
        if isinstance(self.value, float):
            return f"{self.value:.0f}"
        return str(self.value)


class ReportFormatter:
    """Append-only list of rows, rendered once at the end of a run."""

    def __init__(self):
        self.rows: List[ReportRow] = []

    def add(self, metric: str, value: Union[int, float], unit: str) -> ReportRow:
        row = ReportRow(metric=metric, value=value, unit=unit)
        self.rows.append(row)
        return row

    def __len__(self) -> int:
        return len(self.rows)

    def _separator(self) -> str:
        return (
            f"+{'-' * (LABEL_WIDTH + 2)}"
            f"+{'-' * (VALUE_WIDTH + 2)}"
            f"+{'-' * (UNIT_WIDTH + 2)}+"
        )

    def _line(self, label: str, value: str, unit: str) -> str:
        return (
            f"| {label:<{LABEL_WIDTH}} "
            f"| {value:<{VALUE_WIDTH}} "
            f"| {unit:<{UNIT_WIDTH}} |"
        )

    def render(self) -> str:
        """Render the table; long cells widen their line rather than truncate."""
        lines = [
            self._separator(),
            self._line("Test", "result", "unit"),
            self._separator(),
        ]
        for row in self.rows:
            lines.append(self._line(row.metric, row.format_value(), row.unit))
        lines.append(self._separator())
        return "\n".join(lines)

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [asdict(row) for row in self.rows]
