"""Power supply health from ``ipmitool sdr type 'Power Supply'`` output."""

from __future__ import annotations

POWER_OK = 0
POWER_BAD = 1
POWER_NO_OUTPUT = -2


def parse_power_stat(output: str) -> int:
    """Return 0 if every supply reports ok, 1 if one does not, -2 for no output."""
    if output == "":
        return POWER_NO_OUTPUT
    for raw in output.split("\n"):
        line = raw.strip()
        if not line:
            continue
        fields = line.split("|")
        if len(fields) < 4:
            continue
        if fields[2].strip().lower() != "ok":
            return POWER_BAD
    return POWER_OK