"""Qt adapters for managed-mode loaders."""
