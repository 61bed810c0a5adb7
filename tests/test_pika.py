import pytest

from opskit.pika import (
    PikaConfVars,
    PikaInfo,
    get_pika_conf_vars,
    get_pika_info,
    parse_info_text,
)

SERVER_TEXT = """# Server
pika_version:2.3.0
os:Linux 2.6.32 x86_64
process_id:12969
tcp_port:9001
config_file:/data1/pika9001/pika9001.conf
server_id:1
"""

KEYSPACE_TEXT = """# Keyspace
# Time:1970-01-01 08:00:00
kv   keys:43
hash keys:503
list keys:0
zset keys:7
set  keys:2
"""


def test_parse_info_text_skips_comments_and_splits_on_first_colon():
    result = parse_info_text("# Stats\nis_bgsaving:No, , 0\nslave0: host_port=h:57765\n\n")
    assert result == {"is_bgsaving": "No, , 0", "slave0": "host_port=h:57765"}


def test_update_server():
    info = PikaInfo()
    info.update_server(parse_info_text(SERVER_TEXT))
    assert info.process_id == 12969
    assert info.config_file == "/data1/pika9001/pika9001.conf"
    assert info.server_id == 1


def test_update_server_bad_number_gives_zero():
    info = PikaInfo(process_id=5, server_id=9)
    info.update_server({"process_id": "abc", "server_id": "-3"})
    assert info.process_id == 0
    assert info.server_id == 0


def test_update_data_and_clients():
    info = PikaInfo()
    info.update_data(
        {"db_size": "770439", "used_memory": "4248", "db_memtable_usage": "4120",
         "db_tablereader_usage": "128", "compression": "snappy"}
    )
    info.update_clients({"connected_clients": "2"})
    assert (info.db_size, info.used_memory) == (770439, 4248)
    assert (info.db_memtable_usage, info.db_tablereader_usage) == (4120, 128)
    assert info.connected_clients == 2


def test_update_stats():
    info = PikaInfo()
    info.update_stats(
        {
            "total_connections_received": "18",
            "instantaneous_ops_per_sec": "1.5",
            "accumulative_query_nums": "633",
            "total_commands_processed": "654545975485",
            "is_bgsaving": "Yes, dump, 0",
            "is_scaning_keyspace": "No",
            "is_compact": "yes",
        }
    )
    assert info.total_connections_received == 18
    assert info.instantaneous_ops_per_sec == 1.5
    assert info.accumulative_query_nums == 633
    assert info.total_commands_processed == 654545975485
    assert info.is_bgsaving == 1
    assert info.is_scaning_keyspace == 0
    assert info.is_compact == 1


def test_update_stats_unknown_flag_keeps_previous():
    info = PikaInfo(is_bgsaving=1, is_compact=1)
    info.update_stats({"is_bgsaving": "maybe", "is_compact": "??", "instantaneous_ops_per_sec": "x"})
    assert info.is_bgsaving == 1
    assert info.is_compact == 1
    assert info.instantaneous_ops_per_sec == 0.0


def test_update_replication_slave():
    info = PikaInfo()
    info.update_replication(
        {"role": "slave", "master_host": "10.0.0.1", "master_port": "9001",
         "master_link_status": "UP", "slave_read_only": "1"}
    )
    assert info.role == "slave"
    assert info.is_slave == 1
    assert info.master_host == "10.0.0.1"
    assert info.master_port == 9001
    assert info.master_link_status == 1
    assert info.slave_read_only == 1


def test_update_replication_master():
    info = PikaInfo(is_slave=1, master_link_status=1)
    info.update_replication({"role": "master", "connected_slaves": "3", "master_link_status": "down"})
    assert info.is_slave == 0
    assert info.connected_clients == 3
    assert info.master_link_status == 0


def test_update_keyspace():
    info = PikaInfo()
    info.update_keyspace(parse_info_text(KEYSPACE_TEXT))
    assert (info.keys_cnt, info.keys_cnt_hash, info.keys_cnt_list) == (43, 503, 0)
    assert (info.keys_cnt_zset, info.keys_cnt_set) == (7, 2)


def test_get_pika_info_reads_all_sections():
    texts = {"server": SERVER_TEXT, "keyspace": KEYSPACE_TEXT,
             "replication": "role:master\n"}
    asked = []

    def fetch(section):
        asked.append(section)
        return parse_info_text(texts.get(section, ""))

    info = get_pika_info(fetch)
    assert asked == ["server", "data", "clients", "stats", "replication", "keyspace"]
    assert info.process_id == 12969
    assert info.keys_cnt_hash == 503
    assert info.is_slave == 0


def test_get_pika_info_propagates_errors():
    def fetch(section):
        if section == "stats":
            raise ConnectionError("gone")
        return {}

    with pytest.raises(ConnectionError):
        get_pika_info(fetch)


def _fetch_config(name):
    if name == "maxclients":
        raise KeyError(name)
    return {"maxmemory": 1024, "target-file-size-base": 2048}[name]


def test_get_pika_conf_vars_skips_errors():
    conf = get_pika_conf_vars(_fetch_config, False)
    assert conf == PikaConfVars(maxmemory=1024, target_file_size_base=2048, maxclients=0)


def test_get_pika_conf_vars_breaks_on_error():
    with pytest.raises(KeyError):
        get_pika_conf_vars(_fetch_config, True)