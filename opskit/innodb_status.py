"""Counters parsed from the text of ``show engine innodb status``."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from contextlib import closing

from opskit.mysql_query import merge_counters

SQL_INNODB_STATUS = "show engine innodb status"

_DIGITS = re.compile(r"[0-9]+")
_UINT64_LIMIT = 2**64


def _parse_uint(text: str) -> int | None:
    """Parse an unsigned 64-bit decimal, or return None if it is not one."""
    if _DIGITS.fullmatch(text) is None:
        return None
    number = int(text)
    return number if number < _UINT64_LIMIT else None


def _field_value(fields: list[str], index: int, strip_commas: bool) -> int | None:
    if index >= len(fields):
        return None
    text = fields[index].strip()
    if strip_commas:
        text = text.strip(",")
    return _parse_uint(text)


def _collect(
    fields: list[str], specs: Iterable[tuple[int, str]], strip_commas: bool = False
) -> dict[str, int]:
    """Read the numbers at the given field positions into named counters."""
    values: dict[str, int] = {}
    for index, key in specs:
        value = _field_value(fields, index, strip_commas)
        if value is not None:
            values[key] = value
    return values


def _word_at(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


def _spin_specs(tag: str) -> tuple[tuple[int, str, int, str], ...]:
    return (
        (1, "spins", 2, f"Sema{tag}Spins"),
        (3, "rounds", 4, f"Sema{tag}Rounds"),
        (6, "waits", 7, f"Sema{tag}OsWaits"),
    )


# prefix -> (position of a checked word, the word, position of the number, counter)
_SPIN_LINES: tuple[tuple[str, tuple[tuple[int, str, int, str], ...]], ...] = (
    (
        "Mutex spin waits",
        (
            (2, "waits", 3, "SemaMutexSpinWaits"),
            (4, "rounds", 5, "SemaMutexRounds"),
            (7, "waits", 8, "SemaMutexOsWaits"),
        ),
    ),
    ("RW-shared spins", _spin_specs("Rwsh")),
    ("RW-excl spins", _spin_specs("Rwex")),
    ("RW-sx spins", _spin_specs("Rwsx")),
)


def parse_semaphores(line: str) -> dict[str, int]:
    """Parse one line of the SEMAPHORES section."""
    fields = line.split()
    if line.startswith("OS WAIT ARRAY INFO:"):
        kind = _word_at(fields, 4)
        if len(fields) > 7:
            specs = []
            if kind == "reservation":
                specs.append((6, "SemaOsWaitReserve"))
            if kind == "signal":
                specs.append((9, "SemaOsWaitSignal"))
            return _collect(fields, specs, strip_commas=True)
        if kind == "reservation":
            return _collect(fields, [(6, "SemaOsWaitReserve")], strip_commas=True)
        if kind == "signal":
            return _collect(fields, [(6, "SemaOsWaitSignal")], strip_commas=True)
        return {}

    for prefix, specs in _SPIN_LINES:
        if line.startswith(prefix):
            wanted = [
                (value_index, key)
                for check_index, word, value_index, key in specs
                if _word_at(fields, check_index) == word
            ]
            return _collect(fields, wanted, strip_commas=True)
    return {}


def parse_transactions(line: str) -> dict[str, int]:
    """Parse one line of the TRANSACTIONS section."""
    if line.startswith("History list length"):
        return _collect(line.split(), [(3, "TrxHistoryLength")])
    return {}


def parse_log(line: str) -> dict[str, int]:
    """Parse one line of the LOG section."""
    if "pending log writes" in line:
        return _collect(
            line.split(),
            [(0, "LogPendingRedoLogWrite"), (4, "LogPendingRedoLogChkpWrite")],
        )
    return {}


def parse_file_io(line: str) -> dict[str, int]:
    """Parse one line of the FILE I/O section."""
    fields = line.split()
    if line.startswith("Pending flushes (fsync) log:"):
        return _collect(
            fields,
            [(4, "IOPendingFsyncLog"), (7, "IOPendingFsyncData")],
            strip_commas=True,
        )
    if "OS file reads" in line and "OS file writes" in line:
        return _collect(
            fields, [(0, "IOFileReads"), (4, "IOFileWrites"), (8, "IOOSFsync")]
        )
    return {}


def parse_row_operation(line: str) -> dict[str, int]:
    """Parse one line of the ROW OPERATIONS section."""
    fields = line.split()
    if "queries inside InnoDB" in line:
        return _collect(
            fields, [(0, "RowsOpQueriesInInnodb"), (4, "RowsOpQueriesInQueue")]
        )
    if "read views open inside InnoDB" in line:
        return _collect(fields, [(0, "RowsOpReadViewsInInnodb")])
    if line.startswith("Number of rows inserted"):
        return _collect(
            fields,
            [
                (4, "RowsOpRowsInserted"),
                (6, "RowsOpRowsUpdated"),
                (8, "RowsOpRowsDeleted"),
                (10, "RowsOpRowsRead"),
            ],
        )
    return {}


_LINE_PARSERS: tuple[Callable[[str], dict[str, int]], ...] = (
    parse_semaphores,
    parse_transactions,
    parse_file_io,
    parse_log,
    parse_row_operation,
)


def parse_status_text(text: str) -> dict[str, int]:
    """Collect counters from a whole status text; the first value seen wins."""
    values: dict[str, int] = {}
    for line in text.strip().split("\n"):
        for parser in _LINE_PARSERS:
            found = parser(line)
            if found:
                values = merge_counters(values, found)
                break
    return values


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def show_innodb_status(conn) -> dict[str, int]:
    """Run ``show engine innodb status`` and return the parsed counters."""
    with closing(conn.cursor()) as cur:
        cur.execute(SQL_INNODB_STATUS)
        rows = list(cur.fetchall())
    values: dict[str, int] = {}
    for _type, _name, status in rows:
        values = merge_counters(values, parse_status_text(_as_text(status)))
    return values