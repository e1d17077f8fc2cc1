"""divvyplan command line interface."""
