"""Infrastructure: persistence, security, and external delivery channels."""
