"""linear-to-pr: turn a Linear issue into a pull request carrying Claude's implementation plan."""

__version__ = "0.1.0"
