"""Dotfile mapping table and symlink linker."""
