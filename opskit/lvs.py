"""LVS (ipvsadm) statistics and related network settings, parsed from command output."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

IPVS_CONN_RE = re.compile(r"size=(\d+)")
LVS_PORT_RE = re.compile(r"^\d+$")

DEFAULT_CONNECTIONS_CMD = "sudo /sbin/ipvsadm -Ln"
DEFAULT_RATES_CMD = "sudo /sbin/ipvsadm -Ln --rate"
NET_CONFIG_CMD_FMT = "sudo ethtool -k %s"
LRO_GRO_CONFIGS = ("generic-receive-offload", "large-receive-offload")

CONN_FAILED = -1
CONN_NO_OUTPUT = -2

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1


def _parse_int64(text: str) -> int | None:
    if _INT_RE.fullmatch(text) is None:
        return None
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def _int_or_minus_one(text: str) -> int:
    number = _parse_int64(text)
    return -1 if number is None else number


@dataclass
class RealServerStat:
    """Counters of one real server behind a virtual service."""

    ip: str = ""
    port: str = ""
    weight: str = ""
    active_conn: int = 0
    inact_conn: int = 0
    cps: int = 0
    in_pps: int = 0
    out_pps: int = 0
    in_bps: int = 0
    out_bps: int = 0


@dataclass
class VhostStat:
    """Counters of one virtual service and its real servers."""

    vip: str = ""
    port: str = ""
    lb: str = ""
    active_conn: int = 0
    inact_conn: int = 0
    cps: int = 0
    in_pps: int = 0
    out_pps: int = 0
    in_bps: int = 0
    out_bps: int = 0
    real_servers: dict[str, RealServerStat] = field(default_factory=dict)


def _split_addr(addr: str) -> list[str] | None:
    parts = addr.split(":")
    return parts if len(parts) == 2 else None


_RATE_ATTRS = ("cps", "in_pps", "out_pps", "in_bps", "out_bps")


@dataclass
class LvsStat:
    """Virtual services keyed by ``vip:port`` and the size of the connection table.

    ``ip_vs_conn`` is -1 when the output could not be read and -2 when it was empty.
    """

    vhost_stats: dict[str, VhostStat] = field(default_factory=dict)
    ip_vs_conn: int = 0

    def _mark(self, code: int) -> None:
        if self.ip_vs_conn == 0 or not self.vhost_stats:
            self.ip_vs_conn = code

    def _read_table_size(self, line: str) -> None:
        if self.ip_vs_conn > 0:
            return
        match = IPVS_CONN_RE.search(line)
        if match:
            self.ip_vs_conn = _int_or_minus_one(match.group(1))

    def _lines(self, output: str) -> Iterable[str]:
        for raw in output.split("\n"):
            line = raw.strip()
            if line:
                yield line

    def parse_connections(self, output: str) -> None:
        """Update from the output of ``ipvsadm -Ln``."""
        if output == "":
            self._mark(CONN_NO_OUTPUT)
            return
        current = ""
        for line in self._lines(output):
            if line.startswith("IP"):
                self._read_table_size(line)
                continue
            fields = line.split()
            if len(fields) < 3:
                continue
            if fields[0] in ("TCP", "UDP"):
                addr = _split_addr(fields[1])
                if addr is not None:
                    vhost = self.vhost_stats.get(fields[1])
                    if vhost is not None:
                        vhost.lb = fields[2]
                    else:
                        self.vhost_stats[fields[1]] = VhostStat(
                            vip=addr[0], port=addr[1], lb=fields[2]
                        )
                    current = fields[1]
                continue
            if len(fields) < 6 or fields[2] != "Route":
                continue
            addr = _split_addr(fields[1])
            vhost = self.vhost_stats.get(current)
            if addr is None or vhost is None:
                continue
            server = vhost.real_servers.get(fields[1])
            if server is not None:
                server.weight = fields[3]
            else:
                server = RealServerStat(ip=addr[0], port=addr[1], weight=fields[3])
                vhost.real_servers[fields[1]] = server
            active = _parse_int64(fields[4])
            if active is None:
                server.active_conn = -1
            else:
                server.active_conn = active
                vhost.active_conn += active
            inactive = _parse_int64(fields[5])
            if inactive is None:
                server.inact_conn = -1
            else:
                server.inact_conn = inactive
                vhost.inact_conn += inactive

    def parse_rates(self, output: str) -> None:
        """Update from the output of ``ipvsadm -Ln --rate``."""
        if output == "":
            self._mark(CONN_NO_OUTPUT)
            return
        current = ""
        for line in self._lines(output):
            if line.startswith("IP"):
                self._read_table_size(line)
                continue
            fields = line.split()
            if len(fields) < 7:
                continue
            addr = _split_addr(fields[1])
            if addr is None or not LVS_PORT_RE.match(addr[1]):
                continue
            target: VhostStat | RealServerStat
            if fields[0] in ("TCP", "UDP"):
                target = self.vhost_stats.setdefault(fields[1], VhostStat())
                current = fields[1]
            elif fields[0] == "->":
                vhost = self.vhost_stats.get(current)
                if vhost is None:
                    continue
                target = vhost.real_servers.setdefault(
                    fields[1], RealServerStat(ip=addr[0], port=addr[1])
                )
            else:
                continue
            for attr, text in zip(_RATE_ATTRS, fields[2:7]):
                setattr(target, attr, _int_or_minus_one(text))


def parse_count(output: str) -> int:
    """Parse a single integer printed by a command; -1 if there is none."""
    text = output.strip()
    if not text:
        return -1
    return _int_or_minus_one(text)


def parse_net_config(output: str, cfgs: Iterable[str] = ()) -> dict[str, int]:
    """Parse ``ethtool -k`` output into feature -> 1 (on) or 0.

    With ``cfgs`` only the named features are kept.
    """
    wanted = set(cfgs)
    result: dict[str, int] = {}
    for raw in output.split("\n"):
        line = raw.strip()
        if not line:
            continue
        parts = line.split(":")
        if len(parts) <= 1:
            continue
        name = parts[0].strip()
        if wanted and name not in wanted:
            continue
        words = parts[1].strip().split()
        if not words:
            continue
        result[name] = 1 if words[0] == "on" else 0
    return result