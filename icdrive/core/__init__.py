"""Core building blocks: session, web API and drive."""
