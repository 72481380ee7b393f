"""datanest container format constants and helpers.

A datanest container is a plain HDF5 file:

    /                       — root group, attr "datanest_format_version"
    /<group>/.../<dataset>  — float64 dataset, shape = dims, row-major

Groups are created on demand by writes and are never pruned.
"""

# Dataset path syntax
SEPARATOR = "/"

# Payload element type
DTYPE = "float64"
ELEMENT_SIZE = 8  # bytes per double

# Threshold default, in bytes
DEFAULT_THRESHOLD = 1024

# File extension
FILE_EXTENSION = ".h5"

# Version of the format
FORMAT_VERSION_ATTR = "datanest_format_version"
FORMAT_VERSION = "1.0.0"

# Suffixes for the temporary siblings used while replacing a dataset
REPLACE_SUFFIX = ".__replace__"
PREVIOUS_SUFFIX = ".__previous__"
