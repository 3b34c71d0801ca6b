"""Backend adapters shipped with the core package."""
