"""Domain layer: settings model, ports, undo bookkeeping and the settings service."""
