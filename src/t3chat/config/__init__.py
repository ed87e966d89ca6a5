"""Configuration: settings, model table and prompt templates."""
