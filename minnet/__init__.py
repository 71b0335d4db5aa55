"""Wire-format parsing for Ethernet, ARP and IPv4, with address, file-descriptor and socket helpers."""

__version__ = "0.1.0"