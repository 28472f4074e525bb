"""Gym access-control integration with door-controller vendor APIs."""
