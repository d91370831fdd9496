from geo.resolver import GoogleGeocoder, LocationResolver, ResolutionError

__all__ = [
    "GoogleGeocoder",
    "LocationResolver",
    "ResolutionError",
]
