"""create-fde-app: scaffold production-ready web apps with cloud deployment config."""

__version__ = "0.1.0"
