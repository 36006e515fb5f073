"""Configuration package; import ``settings`` from ``turnstile.core.config.settings``."""
