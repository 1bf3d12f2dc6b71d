"""Core wiring: settings, exception handlers, lifespan, rate limiter."""
