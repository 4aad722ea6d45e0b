"""GitHub releases as a package manager."""
