"""RESP nodes, an expiring key-value cache, command handlers and a Redis-compatible server."""

__all__ = ["node", "cache", "commands", "server"]