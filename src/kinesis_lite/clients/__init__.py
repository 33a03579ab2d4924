"""Kinesis stream client."""
