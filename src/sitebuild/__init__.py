"""Static-site asset build: copy, compile, lint and serve front-end sources."""

__version__ = "0.1.0"
