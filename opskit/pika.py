"""Pika server information parsed from the sections of its INFO reply."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

INFO_SECTIONS = ("server", "data", "clients", "stats", "replication", "keyspace")

_UNSIGNED_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)
_UINT64_LIMIT = 2**64


def _parse_uint(text: str) -> int | None:
    if _UNSIGNED_RE.fullmatch(text) is None:
        return None
    number = int(text)
    return number if number < _UINT64_LIMIT else None


def _uint_or_zero(text: str) -> int:
    value = _parse_uint(text)
    return 0 if value is None else value


def _float_or_zero(text: str) -> float:
    if _FLOAT_RE.fullmatch(text) is None:
        return 0.0
    return float(text)


def _wrap_signed(number: int, bits: int) -> int:
    """Reduce ``number`` to a two's-complement integer of ``bits`` bits."""
    span = 1 << bits
    number %= span
    return number - span if number >= span >> 1 else number


def _yes_no(text: str, current: int) -> int:
    """Map NO to 0 and YES to 1; anything else leaves ``current`` as it was."""
    if text == "NO":
        return 0
    if text == "YES":
        return 1
    return current


def parse_info_text(text: str) -> dict[str, str]:
    """Split an INFO reply into ``key: value`` pairs, skipping comments and blanks."""
    result: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        result[key.strip()] = value.strip()
    return result


@dataclass
class PikaInfo:
    """Counters and state of one Pika server."""

    process_id: int = 0
    config_file: str = ""
    server_id: int = 0
    db_size: int = 0
    used_memory: int = 0
    db_memtable_usage: int = 0
    db_tablereader_usage: int = 0
    connected_clients: int = 0
    total_connections_received: int = 0
    instantaneous_ops_per_sec: float = 0.0
    accumulative_query_nums: int = 0
    total_commands_processed: int = 0
    is_bgsaving: int = 0
    is_scaning_keyspace: int = 0
    is_compact: int = 0
    role: str = ""
    master_host: str = ""
    master_port: int = 0
    is_slave: int = 0
    master_link_status: int = 0
    slave_read_only: int = 0
    keys_cnt: int = 0
    keys_cnt_hash: int = 0
    keys_cnt_list: int = 0
    keys_cnt_zset: int = 0
    keys_cnt_set: int = 0

    def update_server(self, result: Mapping[str, str]) -> None:
        for key, value in result.items():
            match key:
                case "process_id":
                    self.process_id = _wrap_signed(_uint_or_zero(value), 32)
                case "config_file":
                    self.config_file = value
                case "server_id":
                    self.server_id = _uint_or_zero(value)

    def update_data(self, result: Mapping[str, str]) -> None:
        for key, value in result.items():
            match key:
                case "db_size":
                    self.db_size = _uint_or_zero(value)
                case "used_memory":
                    self.used_memory = _uint_or_zero(value)
                case "db_memtable_usage":
                    self.db_memtable_usage = _uint_or_zero(value)
                case "db_tablereader_usage":
                    self.db_tablereader_usage = _uint_or_zero(value)

    def update_clients(self, result: Mapping[str, str]) -> None:
        for key, value in result.items():
            if key == "connected_clients":
                self.connected_clients = _uint_or_zero(value)

    def update_stats(self, result: Mapping[str, str]) -> None:
        for key, value in result.items():
            match key:
                case "total_connections_received":
                    self.total_connections_received = _uint_or_zero(value)
                case "instantaneous_ops_per_sec":
                    self.instantaneous_ops_per_sec = _float_or_zero(value)
                case "accumulative_query_nums":
                    self.accumulative_query_nums = _uint_or_zero(value)
                case "total_commands_processed":
                    self.total_commands_processed = _uint_or_zero(value)
                case "is_bgsaving":
                    first = value.split(",")[0].strip().upper()
                    self.is_bgsaving = _yes_no(first, self.is_bgsaving)
                case "is_scaning_keyspace":
                    self.is_scaning_keyspace = _yes_no(
                        value.upper(), self.is_scaning_keyspace
                    )
                case "is_compact":
                    self.is_compact = _yes_no(value.upper(), self.is_compact)

    def update_replication(self, result: Mapping[str, str]) -> None:
        for key, value in result.items():
            match key:
                case "role":
                    self.role = value
                    self.is_slave = 0 if value == "master" else 1
                case "master_host":
                    self.master_host = value
                case "master_port":
                    self.master_port = _uint_or_zero(value)
                case "connected_slaves":
                    self.connected_clients = _uint_or_zero(value)
                case "master_link_status":
                    self.master_link_status = 1 if value.lower() == "up" else 0
                case "slave_read_only":
                    self.slave_read_only = _wrap_signed(_uint_or_zero(value), 8)

    def update_keyspace(self, result: Mapping[str, str]) -> None:
        attrs = {
            "kv": "keys_cnt",
            "hash": "keys_cnt_hash",
            "list": "keys_cnt_list",
            "zset": "keys_cnt_zset",
            "set": "keys_cnt_set",
        }
        for key, value in result.items():
            words = key.split()
            if not words:
                continue
            attr = attrs.get(words[0])
            if attr is not None:
                setattr(self, attr, _uint_or_zero(value))


@dataclass
class PikaConfVars:
    """A few configuration values of a Pika server."""

    maxmemory: int = 0
    target_file_size_base: int = 0
    maxclients: int = 0


def get_pika_info(fetch_info: Callable[[str], Mapping[str, str]]) -> PikaInfo:
    """Collect a PikaInfo; ``fetch_info(section)`` returns the pairs of one INFO section.

    An error raised by ``fetch_info`` is passed on.
    """
    info = PikaInfo()
    updaters = {
        "server": info.update_server,
        "data": info.update_data,
        "clients": info.update_clients,
        "stats": info.update_stats,
        "replication": info.update_replication,
        "keyspace": info.update_keyspace,
    }
    for section in INFO_SECTIONS:
        updaters[section](fetch_info(section))
    return info


def get_pika_conf_vars(
    fetch_config: Callable[[str], int], break_on_error: bool = False
) -> PikaConfVars:
    """Read configuration values through ``fetch_config(name)``.

    With ``break_on_error`` the first failure is raised; otherwise a value
    that cannot be read keeps its zero default.
    """
    conf = PikaConfVars()
    wanted = (
        ("maxmemory", "maxmemory"),
        ("maxclients", "maxclients"),
        ("target-file-size-base", "target_file_size_base"),
    )
    for name, attr in wanted:
        try:
            value = fetch_config(name)
        except Exception:  # noqa: BLE001 - any lookup failure is handled alike
            if break_on_error:
                raise
            continue
        setattr(conf, attr, value)
    return conf