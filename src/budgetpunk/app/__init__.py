"""Application bootstrap, configuration and shell."""
