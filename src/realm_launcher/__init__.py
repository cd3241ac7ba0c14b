"""Realm launcher: server profiles, realmlist synchronization and client launch."""

__version__ = "0.1.0"
