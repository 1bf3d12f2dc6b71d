"""External integrations (outbound delivery channels)."""
