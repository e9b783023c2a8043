"""
Map and dataset constants.

Centralizes the external URLs and the overlay styling handed to the
browser so the map front end and the API agree on layer ids.
"""


class ExternalMapEndpoints:
    """External map service URLs."""

    GOOGLE_MAPS_SEARCH = "https://www.google.com/maps?q={latitude},{longitude}"
    MAPTILER_STREETS_STYLE = "https://api.maptiler.com/maps/streets/style.json?key={key}"

    @classmethod
    def get_style_url(cls, key: str) -> str:
        """
        Get the base map style URL for a MapTiler key.

        Args:
            key: MapTiler API key (may be empty)

        Returns:
            Style document URL
        """
        return cls.MAPTILER_STREETS_STYLE.format(key=key)


class MapDefaults:
    """Initial camera and overlay styling for the dashboard map."""

    # Centered over Indonesia
    INITIAL_LONGITUDE = 117.9903
    INITIAL_LATITUDE = -2.5489
    INITIAL_ZOOM = 5

    CONCESSIONS_SOURCE_ID = "indonesia-boundaries"
    CONCESSIONS_FILL_LAYER_ID = "indonesia-boundaries"
    CONCESSIONS_LINE_LAYER_ID = "indonesia-boundaries-line"

    FILL_PAINT = {
        "fill-color": "#ffcccb",
        "fill-opacity": 0.5,
    }
    LINE_PAINT = {
        "line-color": "#ff0000",
        "line-width": 2,
    }


class DatasetNames:
    """Identifiers used for the datasets fetched from the host."""

    CONCESSIONS = "concessions"
    PONDS = "ponds"
    CONCESSIONS_CSV = "concessions_csv"


class APIConstants:
    """General API configuration constants."""

    CONTENT_TYPE_CSV = "text/csv"

    CSV_DOWNLOAD_FILENAME = "Indonesia_oil_palm_concessions.csv"
