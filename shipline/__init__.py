"""shipline - build, lint, artifact and release pipeline for a Rust binary."""

__version__ = "0.1.0"
