"""Result persistence services."""
