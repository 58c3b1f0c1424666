"""Tabular upload reading (CSV / Excel)."""
