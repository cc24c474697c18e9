"""Project-wide named constants.

Values shared by the controllers, clients and presentation layer live here
instead of being repeated as inline literals.
"""

# Quiet period after the last keystroke before a movie lookup is sent.
LOOKUP_DEBOUNCE_SECONDS: float = 0.5

# Quiet period for the browse-by-name filter input in the TUI.
RECIPIENT_FILTER_DEBOUNCE_SECONDS: float = 0.3

# The catalog ranks results; only the top entries are offered for selection.
MAX_CANDIDATES: int = 10

# Browse-by-name shows at most this many confessions (newest first).
RECIPIENT_FEED_LIMIT: int = 50

# Measured in UTF-16 code units.
MAX_MESSAGE_LENGTH: int = 1000

TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL: str = "https://image.tmdb.org/t/p"
TMDB_DEFAULT_LANGUAGE: str = "en-US"

POSTER_SIZE_THUMB: str = "w92"
POSTER_SIZE_CARD: str = "w500"

CONFESSIONS_TABLE: str = "confessions"

SUCCESS_NOTICE: str = "Your confession has been shared anonymously ✨"
SUBMIT_FAILED_NOTICE: str = "Failed to submit confession. Please try again."
