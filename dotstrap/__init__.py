"""dotstrap: link dotfiles and install a personal CLI toolbox."""

__version__ = "0.1.0"
