"""Node-local storage resource reconciliation agent."""

__version__ = "0.1.0"
