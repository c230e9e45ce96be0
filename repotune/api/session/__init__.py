"""Session control and presentation resources."""
