"""Replication state from ``show slave status`` and ``show master status``."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from contextlib import closing
from dataclasses import dataclass

SQL_SLAVE_STATUS = "show slave status"
SQL_MASTER_STATUS = "show master status"

_UNSIGNED_RE = re.compile(r"[0-9]+")
_SIGNED_RE = re.compile(r"[+-]?[0-9]+")
_UINT64_LIMIT = 2**64
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _parse_uint(text: str) -> int:
    if not _UNSIGNED_RE.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    number = int(text)
    if number >= _UINT64_LIMIT:
        raise ValueError(f"unsigned integer out of range: {text!r}")
    return number


def _parse_int(text: str) -> int:
    if not _SIGNED_RE.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return number


def _is_yes(text: str) -> bool:
    return text.lower() == "yes"


@dataclass
class SlaveStatus:
    """The interesting columns of ``show slave status``."""

    is_slave: bool = False
    master_host: str = ""
    master_port: int = 0
    master_user: str = ""
    master_password: str = ""
    master_log_file: str = ""
    read_master_log_pos: int = 0
    relay_log_file: str = ""
    relay_log_pos: int = 0
    relay_master_log_file: str = ""
    exec_master_log_pos: int = 0
    relay_log_space: int = 0
    slave_io_running: bool = False
    slave_sql_running: bool = False
    seconds_behind_master: int = 0
    sql_delay: int = 0
    master_uuid: str = ""
    auto_position: int = 0
    retrieved_gtid_set: str = ""
    executed_gtid_set: str = ""
    replicate_do_db: str = ""
    replicate_ignore_db: str = ""
    replicate_do_table: str = ""
    replicate_ignore_table: str = ""
    replicate_wild_do_table: str = ""
    replicate_wild_ignore_table: str = ""
    replicate_ignore_server_ids: str = ""
    master_server_id: int = 0
    until_condition: str = ""
    until_log_file: str = ""
    until_log_pos: int = 0
    last_errno: int = 0
    last_error: str = ""
    last_io_errno: int = 0
    last_io_error: str = ""
    last_io_error_timestamp: int = 0
    last_sql_errno: int = 0
    last_sql_error: str = ""
    last_sql_error_timestamp: int = 0

    def __str__(self) -> str:
        lines = [
            "",
            f"Master_Host={self.master_host}",
            f"Master_Port={self.master_port}",
            "",
            f"Master_Log_File={self.master_log_file}",
            f"Read_Master_Log_Pos={self.read_master_log_pos}",
            "",
            f"Relay_Master_Log_File={self.relay_master_log_file}",
            f"Exec_Master_Log_Pos={self.exec_master_log_pos}",
            "",
            f"Relay_Log_File={self.relay_log_file}",
            f"Relay_Log_Pos={self.relay_log_pos}",
            "",
            f"Master_UUID={self.master_uuid}",
            f"Retrieved_Gtid_Set={self.retrieved_gtid_set}",
            f"Executed_Gtid_Set={self.executed_gtid_set}",
            "",
        ]
        return "\n\t".join(lines)


@dataclass
class MasterStatus:
    """The columns of ``show master status``."""

    file: str = ""
    position: int = 0
    binlog_do_db: str = ""
    binlog_ignore_db: str = ""
    executed_gtid_set: str = ""

    def __str__(self) -> str:
        lines = [
            "",
            f"File={self.file}",
            f"Position={self.position}",
            f"Executed_Gtid_Set={self.executed_gtid_set}",
            f"Binlog_Do_DB={self.binlog_do_db}",
            f"Binlog_Ignore_DB={self.binlog_ignore_db}",
            "",
        ]
        return "\n\t".join(lines)


def _text(value: str) -> str:
    return value


# column -> (attribute, converter)
_SLAVE_COLUMNS: dict[str, tuple[str, Callable[[str], object]]] = {
    "Master_Host": ("master_host", _text),
    "Master_Port": ("master_port", _parse_uint),
    "Master_User": ("master_user", _text),
    "Master_Log_File": ("master_log_file", _text),
    "Read_Master_Log_Pos": ("read_master_log_pos", _parse_uint),
    "Relay_Master_Log_File": ("relay_master_log_file", _text),
    "Exec_Master_Log_Pos": ("exec_master_log_pos", _parse_uint),
    "Relay_Log_File": ("relay_log_file", _text),
    "Relay_Log_Pos": ("relay_log_pos", _parse_uint),
    "Relay_Log_Space": ("relay_log_space", _parse_uint),
    "Slave_IO_Running": ("slave_io_running", _is_yes),
    "Slave_SQL_Running": ("slave_sql_running", _is_yes),
    "Seconds_Behind_Master": ("seconds_behind_master", _parse_uint),
    "SQL_Delay": ("sql_delay", _parse_uint),
    "Master_UUID": ("master_uuid", _text),
    "Auto_Position": ("auto_position", _parse_int),
    "Retrieved_Gtid_Set": ("retrieved_gtid_set", _text),
    "Executed_Gtid_Set": ("executed_gtid_set", _text),
    "Replicate_Do_DB": ("replicate_do_db", _text),
    "Replicate_Ignore_DB": ("replicate_ignore_db", _text),
    "Replicate_Do_Table": ("replicate_do_table", _text),
    "Replicate_Ignore_Table": ("replicate_ignore_table", _text),
    "Replicate_Wild_Do_Table": ("replicate_wild_do_table", _text),
    "Replicate_Wild_Ignore_Table": ("replicate_wild_ignore_table", _text),
    "Replicate_Ignore_Server_Ids": ("replicate_ignore_server_ids", _text),
    "Master_Server_Id": ("master_server_id", _parse_int),
    "Until_Condition": ("until_condition", _text),
    "Until_Log_File": ("until_log_file", _text),
    "Until_Log_Pos": ("until_log_pos", _parse_uint),
    "Last_Errno": ("last_errno", _parse_int),
    "Last_Error": ("last_error", _text),
    "Last_IO_Errno": ("last_io_errno", _parse_int),
    "Last_IO_Error": ("last_io_error", _text),
    "Last_SQL_Errno": ("last_sql_errno", _parse_int),
    "Last_SQL_Error": ("last_sql_error", _text),
}

_MASTER_COLUMNS: dict[str, tuple[str, Callable[[str], object]]] = {
    "File": ("file", _text),
    "Position": ("position", _parse_uint),
    "Binlog_Do_DB": ("binlog_do_db", _text),
    "Binlog_Ignore_DB": ("binlog_ignore_db", _text),
    "Executed_Gtid_Set": ("executed_gtid_set", _text),
}


def _present_values(columns: Sequence[str], row: Sequence) -> Iterable[tuple[str, str]]:
    """Yield (column, stripped text) for the non-NULL, non-blank cells of a row."""
    for column, value in zip(columns, row):
        if value is None:
            continue
        text = _as_text(value).strip()
        if text:
            yield _as_text(column), text


def slave_status_from_rows(columns: Sequence[str], rows: Iterable[Sequence]) -> SlaveStatus:
    """Build a SlaveStatus from result columns and rows; a bad number raises ValueError."""
    status = SlaveStatus()
    for row in rows:
        status.is_slave = True
        for column, text in _present_values(columns, row):
            spec = _SLAVE_COLUMNS.get(column)
            if spec is None:
                continue
            attr, convert = spec
            setattr(status, attr, convert(text))
    return status


def master_status_from_rows(columns: Sequence[str], rows: Iterable[Sequence]) -> MasterStatus:
    """Build a MasterStatus from result columns and rows; a bad position raises ValueError."""
    status = MasterStatus()
    for row in rows:
        for column, text in _present_values(columns, row):
            spec = _MASTER_COLUMNS.get(column)
            if spec is None:
                continue
            attr, convert = spec
            try:
                setattr(status, attr, convert(text))
            except ValueError as exc:
                raise ValueError(f"error to parse {text} into uint64: {exc}") from exc
    return status


def _query_with_columns(conn, sql: str) -> tuple[list[str], list]:
    with closing(conn.cursor()) as cur:
        cur.execute(sql)
        columns = [_as_text(desc[0]) for desc in (cur.description or ())]
        rows = list(cur.fetchall())
    return columns, rows


def show_slave_status(conn) -> SlaveStatus:
    """Run ``show slave status`` and parse its single row, if any."""
    return slave_status_from_rows(*_query_with_columns(conn, SQL_SLAVE_STATUS))


def show_master_status(conn) -> MasterStatus:
    """Run ``show master status`` and parse the result."""
    return master_status_from_rows(*_query_with_columns(conn, SQL_MASTER_STATUS))


def master_and_slave_report(conn, addr: str) -> str:
    """Return a text report of both the master and the slave status of a server."""
    master = show_master_status(conn)
    slave = show_slave_status(conn)
    return (
        f"show master status of {addr} :\n{master}\n"
        f"show slave status of {addr}: \n{slave}"
    )