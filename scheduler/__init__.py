"""Slot-finding engine: request analysis, interval arithmetic and gap scoring."""
