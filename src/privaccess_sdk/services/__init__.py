"""Service registry, composition and the resource services built on them."""
