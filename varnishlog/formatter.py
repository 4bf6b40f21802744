"""Output formatters: varnishlog-style text and JSON (NDJSON)."""

import json
from typing import Callable

from varnishlog.models import Transaction

# Begin reference type -> varnishlog group label
LABELS = {
    "sess": "Session",
    "req": "Request",
    "bereq": "BeReq",
}


def format_text(tx: Transaction) -> str:
    """Render a transaction back as a varnishlog block."""
    label = LABELS.get(tx.begin.type, tx.begin.type or "-")
    out = [f"*   << {label:<8} >> {tx.vxid}"]
    for line in tx.lines:
        out.append(f"-   {line.tag:<14} {line.value}".rstrip())
    return "\n".join(out) + "\n"


def format_json(tx: Transaction) -> str:
    """One JSON object per transaction, compatible with jq."""
    return json.dumps(tx.to_dict())


def get_formatter(output_format: str = "text") -> Callable[[Transaction], str]:
    if output_format == "json":
        return format_json
    return format_text
