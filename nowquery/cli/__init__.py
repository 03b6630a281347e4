"""Command line interface for nowquery (`nowquery build`, `nowquery operators`, ...)."""
