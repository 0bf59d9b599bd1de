#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from sys import maxsize

# Sizes
KiB = 1024
MiB = 1024 * KiB

# Standard Header Keys
HEADER_ACCEPT_ENCODING = "Accept-Encoding"
HEADER_USER_AGENT = "User-Agent"
HEADER_AUTHORIZATION = "Authorization"
HEADER_ETAG = "ETag"
# Ref: https://www.rfc-editor.org/rfc/rfc7233#section-2.1
HEADER_RANGE = "Range"
# Customer-supplied encryption key headers
HEADER_ENCRYPTION_ALGORITHM = "x-goog-encryption-algorithm"
HEADER_ENCRYPTION_KEY = "x-goog-encryption-key"
HEADER_ENCRYPTION_KEY_SHA256 = "x-goog-encryption-key-sha256"
# Storage service headers
HEADER_GENERATION = "x-goog-generation"
# Standard Header Values
USER_AGENT_BASE = "blobchannel/python"
ENCRYPTION_ALGORITHM = "AES256"
ENCODING_GZIP = "gzip"

# URL Params
QPARAM_ALT = "alt"
QPARAM_GENERATION = "generation"
QPARAM_IF_GENERATION_MATCH = "ifGenerationMatch"
QPARAM_IF_GENERATION_NOT_MATCH = "ifGenerationNotMatch"
QPARAM_IF_METAGENERATION_MATCH = "ifMetagenerationMatch"
QPARAM_IF_METAGENERATION_NOT_MATCH = "ifMetagenerationNotMatch"
QPARAM_USER_PROJECT = "userProject"
ALT_MEDIA = "media"

# URL Paths
URL_PATH_STORAGE = "storage/v1"
URL_PATH_BUCKETS = "b"
URL_PATH_OBJECTS = "o"
GS_SCHEME = "gs://"

# Defaults
DEFAULT_CHUNK_SIZE = 2 * MiB
DEFAULT_ENDPOINT = "https://storage.googleapis.com"
# Exclusive upper bound used when no limit was set on a channel
UNBOUNDED_LIMIT = maxsize
# Returned by a channel read once no more data can be produced
END_OF_STREAM = -1

# ENCODING
UTF_ENCODING = "utf-8"

# Status Codes
STATUS_OK = 200
STATUS_NOT_FOUND = 404
STATUS_REQUEST_TIMEOUT = 408
STATUS_PRECONDITION_FAILED = 412
STATUS_RANGE_NOT_SATISFIABLE = 416
STATUS_TOO_MANY_REQUESTS = 429
STATUS_INTERNAL_SERVER_ERROR = 500
RETRYABLE_STATUS_CODES = (
    STATUS_REQUEST_TIMEOUT,
    STATUS_TOO_MANY_REQUESTS,
    STATUS_INTERNAL_SERVER_ERROR,
    502,
    503,
    504,
)

# Protocol
HTTP = "http://"
HTTPS = "https://"

# Environment Variables
BLOBCHANNEL_ENDPOINT = "BLOBCHANNEL_ENDPOINT"
BLOBCHANNEL_CA_BUNDLE = "BLOBCHANNEL_CA_BUNDLE"
BLOBCHANNEL_TOKEN = "BLOBCHANNEL_TOKEN"

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
