# opskit

Helpers for people who run MySQL and Pika servers, LVS balancers and the
Linux hosts around them. It builds MySQL connection settings, reads server
variables and status, and turns the text that status commands print into
numbers and small data classes.

## Installation

```
pip install opskit
```

For running the tests:

```
pip install "opskit[test]"
pytest
```

## Modules

| Module | What it offers |
| --- | --- |
| `opskit.mysql_conn` | `MysqlConnConfig` (defaults, validation with `ConfigError`, `build_url`, `connect`, `connect_retry`), `MysqlAddr`, and `error_number` / `is_alive_error` for MySQL error numbers that still show a live server |
| `opskit.mysql_query` | `enable_read_only` / `disable_read_only` and the same for `super_read_only` and `event_scheduler`; `get_variable_value`, `set_and_query_global_var`, `show_global_status`, `show_global_vars` (a `MysqlVars`), `check_binlog_format_row_full`, `check_mysql_alive`, `get_connection_id`, `unlock_all_tables`, `get_mysql_pid` |
| `opskit.innodb_status` | `show_innodb_status` and `parse_status_text`, plus one parser per section (`parse_semaphores`, `parse_transactions`, `parse_log`, `parse_file_io`, `parse_row_operation`) |
| `opskit.replication` | `SlaveStatus` and `MasterStatus`; `show_slave_status`, `show_master_status`, `master_and_slave_report`, and `slave_status_from_rows` / `master_status_from_rows` for rows you already have |
| `opskit.pika` | `PikaInfo` built section by section from an `INFO` reply, `parse_info_text`, `get_pika_info`, `get_pika_conf_vars` |
| `opskit.power` | `parse_power_stat` for `ipmitool sdr type 'Power Supply'` output |
| `opskit.lvs` | `LvsStat` filled from `ipvsadm -Ln` and `ipvsadm -Ln --rate` output; `parse_net_config` for `ethtool -k` output; `parse_count` |
| `opskit.osstats` | `cpu_percent_per_metric` and `max_per_metric` over CPU time samples, `get_net_ifaces` from `/proc/net/dev`, `get_os_mem_stats` (through psutil) |
| `opskit.httpclient` | `request_get` and `request_post` with millisecond timeouts (non-200 raises `HTTPRequestError`), `join_url`, `build_url` |
| `opskit.numbers` | `to_float`, `to_float_numeric`, `missing_items` |
| `opskit.files` | `list_subdirs`, `is_dir`, `dump_json_file` (tab-indented), `read_json_file` |

The MySQL functions take any DB-API connection whose cursor behaves like
PyMySQL's; `MysqlConnConfig.connect` opens one with PyMySQL.

## Examples

Build a connection string and connect, retrying a few times:

```python
from opskit.mysql_conn import MysqlConnConfig

password = "password"
cfg = MysqlConnConfig(user="monitor", password=password)
cfg.set_defaults()
cfg.check_no_socket()
print(cfg.build_url())
conn = cfg.connect_retry(3, 2)
```

Switch a server to read-only; an unexpected value read back raises
`MysqlStateError`:

```python
from opskit.mysql_query import enable_read_only

enable_read_only(conn)
```

Parse InnoDB status text you already have:

```python
from opskit.innodb_status import parse_status_text

counters = parse_status_text(status_text)
print(counters.get("TrxHistoryLength"))
```

Collect Pika information with any function that returns the `key: value`
pairs of one `INFO` section:

```python
from opskit.pika import get_pika_info, parse_info_text

info = get_pika_info(lambda section: parse_info_text(fetch_raw_info(section)))
print(info.role, info.keys_cnt)
```

Read the power-supply state from captured `ipmitool` output:

```python
from opskit.power import parse_power_stat

state = parse_power_stat(output)   # 0 all ok, 1 a supply is not ok, -2 empty output
```

Collect LVS statistics from captured `ipvsadm` output:

```python
from opskit.lvs import LvsStat

stat = LvsStat()
stat.parse_connections(conn_output)
stat.parse_rates(rate_output)
for name, vhost in stat.vhost_stats.items():
    print(name, vhost.active_conn, vhost.cps)
```

## What it does not do

- It does not run commands. The LVS, power, `ethtool` and similar parsers
  take output you have captured yourself.
- It does not send alerts or e-mail, and has no failover handling; the HTTP
  helpers are the only outgoing channel it has.
- It has no command-line program and no daemon; it is a library only.