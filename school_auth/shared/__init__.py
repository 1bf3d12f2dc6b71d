"""Shared cross-cutting helpers (logging, utilities)."""
