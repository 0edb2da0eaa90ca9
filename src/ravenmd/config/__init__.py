"""Configuration layer: settings, raven.toml sections and logging setup."""
