"""HillRoute command-line entry points."""
