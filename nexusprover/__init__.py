"""Prover node toolkit: task records, adaptive difficulty, version requirements, system metrics and dashboard state."""

__version__ = "0.10.14"