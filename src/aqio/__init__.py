"""aqio: event management for the aquaculture industry."""
