"""Multi-tenant authentication and session lifecycle service for schools."""
