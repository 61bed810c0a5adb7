"""Helpers for MySQL and Pika status, LVS and host statistics, and small HTTP and file utilities."""

__version__ = "0.1.0"