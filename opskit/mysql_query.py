"""Queries against a MySQL server: variables, status and switches."""

from __future__ import annotations

import re
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path

import pymysql

from opskit.mysql_conn import is_alive_error

ALIVE_QUERY = "select 1"
SQL_GLOBAL_STATUS = "show global status"
SQL_GLOBAL_VARS = "show global variables"
SQL_UNLOCK_ALL_TABLES = "unlock tables"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


class MysqlStateError(RuntimeError):
    """Raised when the server state is not what was asked for or expected."""


class VariableNotFoundError(MysqlStateError):
    """Raised when the server does not know a system variable."""


@dataclass
class MysqlVars:
    """A few global variables of interest."""

    read_only: bool = False
    pid_file: str = ""
    super_read_only: bool = False
    innodb_read_only: bool = False
    max_connections: int = 0
    max_user_connections: int = 0
    relay_log_space_limit: int = 0


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _execute(conn, sql: str) -> None:
    with closing(conn.cursor()) as cur:
        cur.execute(sql)


def _fetch_all(conn, sql: str) -> list:
    with closing(conn.cursor()) as cur:
        cur.execute(sql)
        return list(cur.fetchall())


def _fetch_first(conn, sql: str):
    with closing(conn.cursor()) as cur:
        cur.execute(sql)
        return cur.fetchone()


def _parse_int(text: str, low: int, high: int) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    number = int(text)
    if not low <= number <= high:
        raise ValueError(f"integer out of range: {text!r}")
    return number


def unlock_all_tables(conn) -> None:
    _execute(conn, SQL_UNLOCK_ALL_TABLES)


def set_and_query_global_var(conn, name: str, value: str) -> str:
    """Set a global variable and return the value read back ("" if no row)."""
    _execute(conn, f"set global {name} = {value}")
    row = _fetch_first(conn, f"select @@global.{name} as val")
    return _as_text(row[0]) if row else ""


def _switch_global(conn, name: str, value: str, expected: str, action: str) -> None:
    try:
        _execute(conn, f"set global {name} = {value}")
    except pymysql.MySQLError as exc:
        raise MysqlStateError(f"error to {action} {name}: {exc}") from exc
    try:
        row = _fetch_first(conn, f"select @@global.{name} as val")
    except pymysql.MySQLError as exc:
        raise MysqlStateError(
            f"OK to {action} {name}, but fail to read back value of {name}: {exc}"
        ) from exc
    result = _as_text(row[0]) if row else ""
    if result == "":
        raise MysqlStateError(f"error to {action} {name}: empty value read back")
    if result != expected:
        raise MysqlStateError(
            f"OK to {action} {name}, but then read back, the value of {name} "
            f"is {result}, not expected {expected}"
        )


def enable_event_scheduler(conn) -> None:
    _switch_global(conn, "event_scheduler", "1", "ON", "enable")


def disable_event_scheduler(conn) -> None:
    _switch_global(conn, "event_scheduler", "0", "OFF", "disable")


def enable_super_read_only(conn) -> None:
    _switch_global(conn, "super_read_only", "1", "ON", "enable")


def disable_super_read_only(conn) -> None:
    _switch_global(conn, "super_read_only", "0", "OFF", "disable")


def enable_read_only(conn) -> None:
    _switch_global(conn, "read_only", "1", "1", "enable")


def disable_read_only(conn) -> None:
    _switch_global(conn, "read_only", "0", "0", "disable")


def get_variable_value(conn, name: str, is_global: bool = True) -> str:
    """Return a system variable as text; raise VariableNotFoundError if unknown."""
    scope = "global" if is_global else "session"
    try:
        row = _fetch_first(conn, f"select @@{scope}.{name} as val")
    except pymysql.MySQLError as exc:
        if "Unknown system variable" in str(exc):
            raise VariableNotFoundError(f"no such variable {name}") from exc
        raise MysqlStateError(f"error to get value of var {name}: {exc}") from exc
    if row is None:
        raise MysqlStateError(f"error to get value of var {name}: no rows")
    return _as_text(row[0])


def get_connection_id(conn) -> int:
    row = _fetch_first(conn, "select connection_id() as id")
    return int(row[0]) if row else 0


def merge_counters(dst: dict, src: dict) -> dict:
    """Merge two mappings into a new dict; keys in ``dst`` win."""
    return {**src, **dst}


def check_mysql_alive(conn, query: str = ALIVE_QUERY) -> bool:
    """Run ``query``; the server counts as alive if it answers at all."""
    try:
        _fetch_all(conn, query)
    except pymysql.MySQLError as exc:
        return is_alive_error(exc)
    return True


def show_global_status(conn) -> dict[str, int]:
    """Return the numeric counters of ``show global status``."""
    status: dict[str, int] = {}
    for name, value in _fetch_all(conn, SQL_GLOBAL_STATUS):
        try:
            status[_as_text(name)] = _parse_int(_as_text(value), _INT64_MIN, _INT64_MAX)
        except ValueError:
            continue
    if not status:
        raise MysqlStateError("no numeric value found in global status")
    return status


def check_binlog_format_row_full(conn) -> None:
    """Require binlog_format=ROW and, where it exists, binlog_row_image=FULL."""
    value = get_variable_value(conn, "binlog_format", True)
    if value != "ROW":
        raise MysqlStateError(f"binlog_format={value}, must be ROW")
    try:
        value = get_variable_value(conn, "binlog_row_image", True)
    except VariableNotFoundError:
        return
    if value != "FULL":
        raise MysqlStateError(f"binlog_row_image={value}, must be FULL")


def bytes_to_int(data) -> int:
    """Parse a 64-bit signed decimal integer from bytes or text."""
    return _parse_int(_as_text(data), _INT64_MIN, _INT64_MAX)


def _int_or_minus_one(data) -> int:
    try:
        return bytes_to_int(data)
    except ValueError:
        return -1


def show_global_vars(conn) -> MysqlVars:
    result = MysqlVars()
    for name, raw in _fetch_all(conn, SQL_GLOBAL_VARS):
        name = _as_text(name)
        text = _as_text(raw)
        match name:
            case "read_only":
                result.read_only = text.upper() == "ON"
            case "pid_file":
                result.pid_file = text
            case "super_read_only":
                result.super_read_only = text.upper() == "ON"
            case "innodb_read_only":
                result.innodb_read_only = text.upper() == "ON"
            case "max_connections":
                result.max_connections = _int_or_minus_one(raw)
            case "max_user_connections":
                result.max_user_connections = _int_or_minus_one(raw)
            case "relay_log_space_limit":
                result.relay_log_space_limit = _int_or_minus_one(raw)
    return result


def get_mysql_pid(pid_file: str | Path) -> int:
    """Read a process id from a MySQL pid file."""
    if not pid_file:
        raise ValueError("parameter pid_file is empty")
    path = Path(pid_file)
    if not path.is_file():
        raise FileNotFoundError(f"{path} is not a file")
    text = path.read_bytes().decode("utf-8", errors="replace").strip()
    return _parse_int(text, _INT32_MIN, _INT32_MAX)