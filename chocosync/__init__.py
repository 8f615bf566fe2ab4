"""chocosync — declarative package reconciliation over Chocolatey."""

__version__ = "0.1.0"
