"""Asian Drama Board: browse TMDB dramas and keep ratings, seen flags and favorites."""
