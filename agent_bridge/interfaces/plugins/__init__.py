"""Plugin, action and ranking interfaces."""
