"""Dataset, parameter and statistics models."""
