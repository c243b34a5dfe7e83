"""Feature-effect analysis for preprocessor-conditioned code."""
