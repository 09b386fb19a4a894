"""Dotfiles installer with versioned backups."""

__version__ = "0.1.0"
