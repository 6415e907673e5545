"""
Constants for the Imbo client library.
Wire names and defaults follow the Imbo server's URL contract.
"""

# Query string parameters understood by the server
PARAM_TRANSFORMATIONS = "t[]"
PARAM_ACCESS_TOKEN = "accessToken"
PARAM_PUBLIC_KEY = "publicKey"
PARAM_SIGNATURE = "signature"
PARAM_TIMESTAMP = "timestamp"

# Response headers describing the original image: property -> (header, type)
IMAGE_PROPERTY_HEADERS = {
    'width': ("X-Imbo-OriginalWidth", int),
    'height': ("X-Imbo-OriginalHeight", int),
    'filesize': ("X-Imbo-OriginalFilesize", int),
    'extension': ("X-Imbo-OriginalExtension", str),
    'mimetype': ("X-Imbo-OriginalMimeType", str),
}

# Request timestamp format (second precision, UTC)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Characters left unescaped by JavaScript's encodeURIComponent
URL_COMPONENT_SAFE = "-_.!~*'()"

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 30,              # HTTP timeout in seconds
}

# Transformation defaults
DEFAULT_COLOR = "000000"
DEFAULT_BORDER_WIDTH = 1
DEFAULT_BORDER_HEIGHT = 1
DEFAULT_COMPRESSION_LEVEL = 75
DEFAULT_SEPIA_THRESHOLD = 80
DEFAULT_THUMBNAIL_WIDTH = 50
DEFAULT_THUMBNAIL_HEIGHT = 50
DEFAULT_THUMBNAIL_FIT = "outbound"
DEFAULT_WATERMARK_POSITION = "top-left"

# Image listing defaults
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
