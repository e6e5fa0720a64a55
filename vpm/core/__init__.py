"""Core reconciliation logic: manifest, install, uninstall, update."""
