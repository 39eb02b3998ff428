"""Core helpers shared by the scaffolder and the CLI."""
