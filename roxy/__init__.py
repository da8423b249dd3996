"""Asyncio building blocks for a Shadowsocks AEAD client, with cron expression parsing."""

__version__ = "0.1.0"