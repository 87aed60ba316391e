"""Pure scrape pipeline: models, parsing, projection and encoding."""
