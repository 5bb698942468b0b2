from komiut_store.routes.models import Route


def calculate_fare(route: Route, from_stop_index: int, to_stop_index: int) -> float:
    """Fare between two stops of a route, in the route's currency.

    ``base_fare + fare_per_stop * stops travelled``, the same in either
    direction. Boarding and alighting at the same stop costs 0. Indices
    are not bounds-checked here.
    """
    stops_travelled = abs(to_stop_index - from_stop_index)
    if stops_travelled == 0:
        return 0.0
    return round(route.base_fare + route.fare_per_stop * stops_travelled, 2)
