"""Go Service Bootstrap -- scaffolds Go backend services from feature choices."""

__version__ = "0.1.0"
