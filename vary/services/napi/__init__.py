"""Multi-platform napi package release pipeline."""
