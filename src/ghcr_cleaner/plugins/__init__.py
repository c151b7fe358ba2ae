"""External collaborators: clients for the package host and registry."""
