"""Reconciliation core: rules, planning, orchestration and settings."""
