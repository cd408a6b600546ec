"""Lua runtime adapter built on lupa."""
