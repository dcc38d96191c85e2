"""Share Last.fm scrobbles of followed users with a chat channel."""
