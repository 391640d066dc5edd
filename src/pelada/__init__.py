"""Team balancing and peer-rating engine for pickup soccer matches."""
