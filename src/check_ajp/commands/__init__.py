"""Command groups for the check-ajp CLI."""
