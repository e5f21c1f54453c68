"""Track work sessions in a CSV file and report time worked per day."""

__version__ = "0.1.0"
