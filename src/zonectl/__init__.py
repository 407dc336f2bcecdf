"""zonectl — batch DNS record operations across pluggable registries."""

__version__ = "0.1.0"
