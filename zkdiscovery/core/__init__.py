"""Registration, discovery and the namespace policy they share."""
