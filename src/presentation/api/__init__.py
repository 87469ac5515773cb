"""Versioned management API, its middleware and error rendering."""
