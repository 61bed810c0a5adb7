"""MySQL connection settings, DSN building and connection helpers."""

from __future__ import annotations

import time
from dataclasses import dataclass
from urllib.parse import quote_plus
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pymysql

ER_TOO_MANY_USER_CONNECTIONS = 1203
ER_ACCESS_DENIED_ERROR = 1045
ER_ACCESS_DENIED_NO_PASSWORD_ERROR = 1698
ER_ACCESS_DENIED_CHANGE_USER_ERROR = 1873

_ALIVE_ERROR_NUMBERS = frozenset(
    {
        ER_ACCESS_DENIED_CHANGE_USER_ERROR,
        ER_ACCESS_DENIED_ERROR,
        ER_ACCESS_DENIED_NO_PASSWORD_ERROR,
        ER_TOO_MANY_USER_CONNECTIONS,
    }
)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3306
DEFAULT_WRITE_TIMEOUT = 10
DEFAULT_READ_TIMEOUT = 10
DEFAULT_TIMEOUT = 5
DEFAULT_LOCATION = "Local"
DEFAULT_CHARSET = "utf8mb4,utf8"


class ConfigError(ValueError):
    """Raised when a connection configuration is incomplete or invalid."""


@dataclass
class MysqlAddr:
    """A MySQL server address."""

    host: str
    port: int

    def addr_str(self) -> str:
        return f"{self.host}:{self.port}"


def _check_location(location: str) -> None:
    if location in ("", "Local", "UTC"):
        return
    try:
        ZoneInfo(location)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"invalid time zone location {location}: {exc}") from exc


@dataclass
class MysqlConnConfig:
    """Settings for one MySQL connection.

    ``parse_time`` and ``autocommit`` are ``None`` until explicitly set, so
    that :meth:`set_defaults` can tell an unset flag from a false one.
    """

    host: str = ""
    port: int = 0
    socket: str = ""
    user: str = ""
    password: str = ""
    default_db: str = ""
    charset: str = ""
    write_timeout: int = 0
    read_timeout: int = 0
    timeout: int = 0
    parse_time: bool | None = None
    location: str = ""
    autocommit: bool | None = None
    url: str = ""

    def addr_str(self, sep: str = ":") -> str:
        return f"{self.host}{sep}{self.port}"

    def _check_credentials(self) -> None:
        if not self.user or not self.password:
            raise ConfigError("user or password is empty")
        _check_location(self.location)

    def check_no_socket(self) -> None:
        """Validate a TCP configuration."""
        if not self.host or self.port <= 0:
            raise ConfigError("empty or invalid mysql addr")
        self._check_credentials()

    def check(self) -> None:
        """Validate a configuration that connects through a socket."""
        if (not self.host and self.port <= 0) or not self.socket:
            raise ConfigError("empty or invalid mysql addr")
        self._check_credentials()

    def set_defaults_overwrite(self) -> None:
        """Reset address, timeouts and flags to their defaults."""
        self.host = DEFAULT_HOST
        self.port = DEFAULT_PORT
        self.write_timeout = DEFAULT_WRITE_TIMEOUT
        self.read_timeout = DEFAULT_READ_TIMEOUT
        self.timeout = DEFAULT_TIMEOUT
        self.parse_time = True
        self.location = DEFAULT_LOCATION
        self.autocommit = True

    def set_defaults(self) -> None:
        """Fill in defaults only where a value is missing."""
        if not self.host:
            self.host = DEFAULT_HOST
        if self.port == 0:
            self.port = DEFAULT_PORT
        if self.write_timeout == 0:
            self.write_timeout = DEFAULT_WRITE_TIMEOUT
        if self.read_timeout == 0:
            self.read_timeout = DEFAULT_READ_TIMEOUT
        if self.timeout == 0:
            self.timeout = DEFAULT_TIMEOUT
        if self.parse_time is None:
            self.parse_time = True
        if not self.location:
            self.location = DEFAULT_LOCATION
        if self.autocommit is None:
            self.autocommit = True

    def build_url(self) -> str:
        """Build the DSN string, store it in ``url`` and return it."""
        parts = [f"{self.user}:{self.password}"]
        if self.socket:
            parts.append(f"@unix({self.socket})/")
        else:
            parts.append(f"@tcp({self.host}:{self.port})/")
        parts.append(self.default_db)
        parts.append(f"?charset={self.charset or DEFAULT_CHARSET}")
        if self.autocommit:
            parts.append("&autocommit=true")
        if self.write_timeout > 0:
            parts.append(f"&writeTimeout={self.write_timeout}s")
        if self.read_timeout > 0:
            parts.append(f"&readTimeout={self.read_timeout}s")
        if self.timeout > 0:
            parts.append(f"&timeout={self.timeout}s")
        if self.parse_time:
            parts.append("&parseTime=true")
        if self.location:
            parts.append(f"&loc={quote_plus(self.location)}")
        self.url = "".join(parts)
        return self.url

    def _connect_kwargs(self) -> dict:
        charset = (self.charset or DEFAULT_CHARSET).split(",")[0].strip()
        kwargs: dict = {
            "user": self.user,
            "password": self.password,
            "database": self.default_db or None,
            "charset": charset,
            "autocommit": bool(self.autocommit),
            "connect_timeout": self.timeout if self.timeout > 0 else DEFAULT_TIMEOUT * 2,
            "read_timeout": self.read_timeout if self.read_timeout > 0 else None,
            "write_timeout": self.write_timeout if self.write_timeout > 0 else None,
        }
        if self.socket:
            kwargs["unix_socket"] = self.socket
        else:
            kwargs["host"] = self.host
            kwargs["port"] = self.port
        return kwargs

    def connect(self):
        """Open a connection and verify it with a ping."""
        conn = pymysql.connect(**self._connect_kwargs())
        try:
            conn.ping(reconnect=False)
        except Exception:
            conn.close()
            raise
        return conn

    def connect_retry(self, count: int, interval: float = 3):
        """Try to connect up to ``count`` times, waiting ``interval`` seconds between tries."""
        if count <= 0:
            raise ConfigError("retry count must be positive")
        last_error: Exception | None = None
        for attempt in range(count):
            if attempt:
                time.sleep(interval)
            try:
                return self.connect()
            except Exception as exc:  # noqa: BLE001 - retried, re-raised below
                last_error = exc
        assert last_error is not None
        raise last_error


def error_number(err: BaseException) -> int | None:
    """Return the MySQL error number carried by ``err``, or ``None``."""
    if not isinstance(err, pymysql.MySQLError):
        return None
    if err.args and isinstance(err.args[0], int):
        return err.args[0]
    return None


def still_alive_error_number(number: int) -> bool:
    """Whether an error number shows the server answered, so it is alive."""
    return number in _ALIVE_ERROR_NUMBERS


def is_alive_error(err: BaseException) -> bool:
    number = error_number(err)
    if number is None:
        return False
    return still_alive_error_number(number)