"""Domain helpers shared by contracts and the core (number formatting, JSON)."""
