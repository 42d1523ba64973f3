"""Domain layer: value objects and domain exceptions."""
