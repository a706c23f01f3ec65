"""Domain types, response records and visibility rules."""
