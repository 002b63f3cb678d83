"""Configuration modules for DevFlow."""
