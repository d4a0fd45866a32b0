"""Internal constants shared across the library."""

#: Column names of the carrier CSV, in header order.
FIELD_NAMES: tuple[str, ...] = (
    "created_dt",
    "entity_type",
    "operating_status",
    "legal_name",
    "out_of_service_date",
    "usdot_number",
)

OUT_OF_SERVICE_FIELD = "out_of_service_date"

DEFAULT_CSV_SOURCE = "./data.csv"
DEFAULT_STORAGE_KEY = "tableSettings"
DEFAULT_SHARE_PARAM = "settings"

INVALID_DATE_LABEL = "Invalid Date"

# ------------------------------------------------------------------
# Bar chart dataset styling
# ------------------------------------------------------------------

CHART_DATASET_LABEL = "Out of Service by Month"
CHART_BACKGROUND_COLOR = "rgba(75, 192, 192, 0.2)"
CHART_BORDER_COLOR = "rgba(75, 192, 192, 1)"
CHART_BORDER_WIDTH = 1

# English month abbreviations; labels must not follow the process locale.
MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

# Characters encodeURIComponent leaves alone beyond letters, digits and "-_.~".
URI_COMPONENT_SAFE = "!*'()"
