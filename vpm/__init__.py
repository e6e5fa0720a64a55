"""vpm - plugin manager for Vim and Neovim."""

__version__ = "0.1.0"
