"""AWS helpers: client management, polling and logging decorators."""
