class FlightRiskError(Exception):
    """Base for errors that abort an evaluation. Messages are shown to the dispatcher as-is."""

    status_code = 500


class UnknownAirport(FlightRiskError):
    status_code = 404

    def __init__(self, airport_id: str):
        self.airport_id = airport_id
        super().__init__(f"Unknown airport: {airport_id}")


class InvalidRoute(FlightRiskError):
    status_code = 400


class WeatherUnavailable(FlightRiskError):
    status_code = 502

    def __init__(self, message: str, airport_id: str | None = None):
        self.airport_id = airport_id
        super().__init__(message)
