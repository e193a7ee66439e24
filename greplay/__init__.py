"""Packet forwarding, injection, pcap dumping and helper data structures for traffic replay."""

__version__ = "0.0.7"