from flightsurety.registry.airlines import AirlineRegistry

__all__ = ["AirlineRegistry"]
