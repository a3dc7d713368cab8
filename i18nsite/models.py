from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class NameStatus:
    """One line of `git diff --name-status`."""

    status: str
    path: str
    old_path: str | None = None

    @classmethod
    def parse(cls, line: str) -> "NameStatus | None":
        parts = line.split("\t")
        if len(parts) < 2 or not parts[0]:
            return None
        status = parts[0]
        # Renames and copies carry a similarity score: R100\told\tnew
        if status[0] in ("R", "C") and len(parts) >= 3:
            return cls(status=status[0], path=parts[2], old_path=parts[1])
        return cls(status=status[0], path=parts[1])


@dataclass
class StepReport:
    notes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def extend(self, other: "StepReport") -> None:
        self.notes.extend(other.notes)
        self.warnings.extend(other.warnings)

    @property
    def ok(self) -> bool:
        return not self.warnings
