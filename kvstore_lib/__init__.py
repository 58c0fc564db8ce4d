"""Key-value storage for application runtimes."""
