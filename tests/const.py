#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

# IEC Units
KIB = 2**10
MIB = 2**20

# Object
BUCKET_NAME = "test-bucket"
OBJ_NAME = "test/obj name.bin"
OBJ_CONTENT = b"ABCDEFGHIJ"
ETAG = "etag-1"
OTHER_ETAG = "etag-2"
