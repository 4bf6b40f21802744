"""Transaction model: lines, parent references and the transactions holding them."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class Line:
    tag: str
    value: str

    def __str__(self) -> str:
        return f"{self.tag} {self.value}"


@dataclass(frozen=True)
class Reference:
    """Pointer to a parent or child transaction (Begin and Link values)."""

    type: str = ""
    vxid: int = 0
    reason: str = ""


@dataclass
class Transaction:
    """A single unit of Varnish work: session, request or backend fetch."""

    vxid: int = 0
    begin: Reference = field(default_factory=Reference)
    lines: list[Line] = field(default_factory=list)

    def find(self, tag: str) -> list[Line]:
        """Return every line with the given tag, in stream order."""
        return [line for line in self.lines if line.tag == tag]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
