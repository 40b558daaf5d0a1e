"""Command line interface (`spark`)."""
