from unittest import mock

import pymysql
import pytest

from opskit.mysql_conn import (
    ConfigError,
    MysqlAddr,
    MysqlConnConfig,
    error_number,
    is_alive_error,
    still_alive_error_number,
)

password = "password"


def test_addr_str():
    assert MysqlAddr("10.0.0.1", 3306).addr_str() == "10.0.0.1:3306"


def test_config_addr_str_with_separator():
    cfg = MysqlConnConfig(host="db1", port=3307)
    assert cfg.addr_str("_") == "db1_3307"
    assert cfg.addr_str() == "db1:3307"


def test_build_url_with_defaults():
    cfg = MysqlConnConfig(user="user", password=password)
    cfg.set_defaults()
    url = cfg.build_url()
    assert url == (
        "user:password@tcp(127.0.0.1:3306)/?charset=utf8mb4,utf8"
        "&autocommit=true&writeTimeout=10s&readTimeout=10s&timeout=5s"
        "&parseTime=true&loc=Local"
    )
    assert cfg.url == url


def test_build_url_socket_db_and_escaped_location():
    cfg = MysqlConnConfig(
        user="user",
        password=password,
        socket="/tmp/mysql.sock",
        default_db="shop",
        charset="latin1",
        location="Asia/Shanghai",
        autocommit=False,
    )
    url = cfg.build_url()
    assert url.startswith("user:password@unix(/tmp/mysql.sock)/shop?charset=latin1")
    assert "autocommit" not in url
    assert url.endswith("&loc=Asia%2FShanghai")


def test_set_defaults_keeps_existing_values():
    cfg = MysqlConnConfig(host="db1", port=3310, timeout=7, parse_time=False, autocommit=False)
    cfg.set_defaults()
    assert (cfg.host, cfg.port, cfg.timeout) == ("db1", 3310, 7)
    assert cfg.parse_time is False
    assert cfg.autocommit is False
    assert cfg.location == "Local"


def test_set_defaults_overwrite_replaces_values():
    cfg = MysqlConnConfig(host="db1", port=3310, timeout=7, autocommit=False)
    cfg.set_defaults_overwrite()
    assert (cfg.host, cfg.port, cfg.timeout) == ("127.0.0.1", 3306, 5)
    assert cfg.autocommit is True


def test_check_no_socket_missing_addr():
    cfg = MysqlConnConfig(user="user", password=password)
    with pytest.raises(ConfigError, match="addr"):
        cfg.check_no_socket()


def test_check_no_socket_missing_password():
    cfg = MysqlConnConfig(host="db1", port=3306, user="user")
    with pytest.raises(ConfigError, match="password"):
        cfg.check_no_socket()


def test_check_no_socket_bad_location():
    cfg = MysqlConnConfig(host="db1", port=3306, user="user", password=password,
                          location="Not/AZone")
    with pytest.raises(ConfigError, match="time zone"):
        cfg.check_no_socket()


def test_check_requires_socket():
    cfg = MysqlConnConfig(host="db1", port=3306, user="user", password=password)
    with pytest.raises(ConfigError, match="addr"):
        cfg.check()


def test_error_number():
    err = pymysql.err.OperationalError(1045, "Access denied")
    assert error_number(err) == 1045
    assert error_number(ValueError("x")) is None


def test_still_alive_error_number():
    assert still_alive_error_number(1045) is True
    assert still_alive_error_number(1203) is True
    assert still_alive_error_number(1064) is False


def test_is_alive_error():
    assert is_alive_error(pymysql.err.OperationalError(1203, "too many")) is True
    assert is_alive_error(pymysql.err.OperationalError(2003, "refused")) is False
    assert is_alive_error(RuntimeError("boom")) is False


def test_connect_pings_and_returns_connection():
    fake = mock.Mock()
    cfg = MysqlConnConfig(host="db1", port=3306, user="user", password=password)
    with mock.patch("opskit.mysql_conn.pymysql.connect", return_value=fake) as connect:
        assert cfg.connect() is fake
    fake.ping.assert_called_once()
    assert connect.call_args.kwargs["host"] == "db1"
    assert connect.call_args.kwargs["charset"] == "utf8mb4"


def test_connect_closes_on_ping_failure():
    fake = mock.Mock()
    fake.ping.side_effect = pymysql.err.OperationalError(2013, "lost")
    cfg = MysqlConnConfig(host="db1", port=3306, user="user", password=password)
    with mock.patch("opskit.mysql_conn.pymysql.connect", return_value=fake):
        with pytest.raises(pymysql.err.OperationalError):
            cfg.connect()
    fake.close.assert_called_once()


def test_connect_retry_succeeds_after_failures():
    fake = mock.Mock()
    err = pymysql.err.OperationalError(2003, "refused")
    cfg = MysqlConnConfig(host="db1", port=3306, user="user", password=password)
    with mock.patch("opskit.mysql_conn.pymysql.connect", side_effect=[err, err, fake]), \
            mock.patch("opskit.mysql_conn.time.sleep") as sleep:
        assert cfg.connect_retry(5, 2) is fake
    assert sleep.call_count == 2
    sleep.assert_called_with(2)


def test_connect_retry_raises_last_error():
    errors = [pymysql.err.OperationalError(2003, "first"),
              pymysql.err.OperationalError(2003, "second")]
    cfg = MysqlConnConfig(host="db1", port=3306, user="user", password=password)
    with mock.patch("opskit.mysql_conn.pymysql.connect", side_effect=errors), \
            mock.patch("opskit.mysql_conn.time.sleep"):
        with pytest.raises(pymysql.err.OperationalError, match="second"):
            cfg.connect_retry(2, 0)


def test_connect_retry_rejects_non_positive_count():
    with pytest.raises(ConfigError):
        MysqlConnConfig().connect_retry(0, 1)